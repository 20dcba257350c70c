"""Great-circle distance and distance-based scoring."""

from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, exp, isfinite, radians, sin, sqrt
from typing import Any, Mapping

EARTH_RADIUS_KM = 6371.0
MAX_ROUND_SCORE = 5000
SCORE_DECAY_KM = 2000.0


class InvalidCoordinate(ValueError):
    """Raised when a latitude/longitude pair cannot be used as a guess."""


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A point on the globe in signed decimal degrees."""

    lat: float
    lng: float

    @classmethod
    def parse(cls, payload: Mapping[str, Any] | None) -> "Coordinate":
        """Build a coordinate from a ``{"lat": .., "lng": ..}`` mapping."""
        if not isinstance(payload, Mapping):
            raise InvalidCoordinate("expected an object with 'lat' and 'lng'")
        try:
            lat = float(payload["lat"])
            lng = float(payload["lng"])
        except KeyError as exc:
            raise InvalidCoordinate(f"missing {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise InvalidCoordinate("'lat' and 'lng' must be numbers") from exc

        if not (isfinite(lat) and isfinite(lng)):
            raise InvalidCoordinate("'lat' and 'lng' must be finite")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            raise InvalidCoordinate(f"coordinate out of bounds: ({lat}, {lng})")
        return cls(lat, lng)

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine distance in kilometres between two coordinates.

    The signed longitude difference is used as-is; no antimeridian correction
    is applied, so scores stay comparable with earlier games.
    """
    delta_lat = radians(b.lat - a.lat)
    delta_lng = radians(b.lng - a.lng)

    h = (
        sin(delta_lat / 2) ** 2
        + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(delta_lng / 2) ** 2
    )
    # Rounding can push h a hair outside [0, 1] for near-antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def score_from_distance(distance: float) -> int:
    """5000 points at 0 km, decaying exponentially with a 2000 km scale."""
    safe_distance = max(0.0, float(distance))
    return max(0, round(MAX_ROUND_SCORE * exp(-safe_distance / SCORE_DECAY_KM)))
