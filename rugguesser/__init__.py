from flask import Flask
from rugguesser.config import Config

def create_app(config_class=Config):
    """Application factory function"""
    app = Flask(__name__)
    app.config.from_object(config_class)

    from rugguesser.logging_config import configure_app_logging
    configure_app_logging(app)

    # Game runtime: one event loop thread hosting every session's engine
    from rugguesser.services.game import RetryPolicy
    from rugguesser.services.rugs import CatalogueSupplier
    from rugguesser.services.runtime import GameRuntime

    supplier = app.config.get("ROUND_SUPPLIER") or CatalogueSupplier(app.config["RUG_CATALOGUE_PATH"])
    retry_policy = RetryPolicy(
        delay_seconds=float(app.config["ROUND_RETRY_DELAY_SECONDS"]),
        max_attempts=int(app.config["ROUND_RETRY_MAX_ATTEMPTS"]) or None,
    )
    app.extensions["game_runtime"] = GameRuntime(
        supplier,
        round_limit=int(app.config["PLAY_ROUNDS"]),
        retry_policy=retry_policy,
        idle_ttl=float(app.config["GAME_IDLE_TTL_SECONDS"]),
        max_sessions=int(app.config["GAME_MAX_SESSIONS"]),
    )

    # Register blueprints
    from rugguesser.api import api_bp
    from rugguesser.routes import health_bp
    app.register_blueprint(api_bp)
    app.register_blueprint(health_bp)

    app.logger.info("RugGuesser ready: %d rounds per game", app.config["PLAY_ROUNDS"])
    return app
