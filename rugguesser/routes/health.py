import logging
from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health", __name__)
log = logging.getLogger(__name__)

@health_bp.get("/health")
def health():
    """Liveness check, with the number of games held in memory."""
    log.debug("health check")
    return jsonify(status="ok", games=len(current_app.extensions["game_runtime"]))
