"""Game API — forwards player gestures to the session's engine."""

import logging
import uuid

from flask import current_app, jsonify, request, session

from rugguesser.api import api_bp
from rugguesser.services.geo import Coordinate, InvalidCoordinate
from rugguesser.services.runtime import GameRuntime

log = logging.getLogger(__name__)

SESSION_KEY = "game_id"


def _runtime() -> GameRuntime:
    return current_app.extensions["game_runtime"]


def _session_id() -> str:
    game_id = session.get(SESSION_KEY)
    if not game_id:
        game_id = uuid.uuid4().hex
        session[SESSION_KEY] = game_id
    return game_id


@api_bp.get("/game/state")
def game_state():
    """Current snapshot; starts a game for a new session."""
    return jsonify(_runtime().call(_session_id(), lambda engine: None))


@api_bp.post("/game/guess")
def submit_guess():
    """Place (or move) the guess marker."""
    try:
        pos = Coordinate.parse(request.get_json(silent=True))
    except InvalidCoordinate as exc:
        log.info("Rejected guess: %s", exc)
        return jsonify({"error": str(exc)}), 400
    return jsonify(_runtime().call(_session_id(), lambda engine: engine.submit_guess(pos)))


@api_bp.post("/game/confirm")
def confirm_guess():
    return jsonify(_runtime().call(_session_id(), lambda engine: engine.confirm_guess()))


@api_bp.post("/game/next")
def next_round():
    return jsonify(_runtime().call(_session_id(), lambda engine: engine.advance()))


@api_bp.post("/game/restart")
def restart_game():
    return jsonify(_runtime().call(_session_id(), lambda engine: engine.restart()))
