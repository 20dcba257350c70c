"""Game services: geo math, rug supplier, engine and its runtime."""

from rugguesser.services.game import GameEngine, GameState, Phase, RetryPolicy, RoundFetchFailure, RoundOutcome
from rugguesser.services.geo import Coordinate, InvalidCoordinate, distance_km, score_from_distance
from rugguesser.services.rugs import CatalogueError, CatalogueSupplier, RugObject

__all__ = [
    "CatalogueError",
    "CatalogueSupplier",
    "Coordinate",
    "GameEngine",
    "GameState",
    "InvalidCoordinate",
    "Phase",
    "RetryPolicy",
    "RoundFetchFailure",
    "RoundOutcome",
    "RugObject",
    "distance_km",
    "score_from_distance",
]
