import os
from pathlib import Path
from dotenv import load_dotenv

DEVELOPMENT_ENV = ".env"
PRODUCTION_ENV = ".env.production"

def _env_path(name: str, default: Path) -> Path:
    """Get an environment variable as a Path. If the variable is not set or empty, return the default."""
    raw = (os.getenv(name) or "").strip()
    return Path(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    """Get an environment variable as a boolean. Recognizes '1', 'true', 'yes', 'on' as True and '0', 'false', 'no', 'off' as False. Anything else returns the default."""
    raw = (os.getenv(name) or "").strip().lower()
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Get an environment variable as an integer. If invalid or missing, return the default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    """Get an environment variable as a float. If invalid or missing, return the default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    BASE_DIR = Path(__file__).resolve().parents[1]  # project root

    load_dotenv(BASE_DIR / (PRODUCTION_ENV if os.getenv("APP_ENV") == "production" else DEVELOPMENT_ENV))

    # ================ Application Settings ================
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
    PORT = _env_int("PORT", 5000)
    DEBUG = _env_bool("FLASK_DEBUG", False)
    TESTING = False

    # ================ Logging Settings ================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
    LOG_DIR = _env_path("LOG_DIR", BASE_DIR / "logs")
    LOG_FILE = os.getenv("LOG_FILE", "app.log")
    LOG_MAX_BYTES = _env_int("LOG_MAX_BYTES", 10 * 1024 * 1024)
    LOG_BACKUP_COUNT = _env_int("LOG_BACKUP_COUNT", 5)
    LOG_IN_TERMINAL = _env_bool("LOG_IN_TERMINAL", True)

    # ================ Rug Catalogue ================
    RUG_CATALOGUE_PATH = _env_path("RUG_CATALOGUE_PATH", Path(__file__).resolve().parent / "data" / "rugs.json")
    ROUND_SUPPLIER = None  # async zero-arg callable; overrides the catalogue when set

    # ================ Play Settings ================
    PLAY_ROUNDS = _env_int("PLAY_ROUNDS", 5)
    ROUND_RETRY_DELAY_SECONDS = _env_float("ROUND_RETRY_DELAY_SECONDS", 1.0)
    ROUND_RETRY_MAX_ATTEMPTS = _env_int("ROUND_RETRY_MAX_ATTEMPTS", 0)  # 0 = retry forever
    GAME_IDLE_TTL_SECONDS = _env_float("GAME_IDLE_TTL_SECONDS", 30 * 60)
    GAME_MAX_SESSIONS = _env_int("GAME_MAX_SESSIONS", 1000)

    WERKZEUG_LOG_LEVEL = "INFO"


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestConfig(Config):
    DEBUG = True
    TESTING = True
    LOG_LEVEL = "DEBUG"
    LOG_FILE = None  # console only
    ROUND_RETRY_DELAY_SECONDS = 0.01


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = "INFO"

    WERKZEUG_LOG_LEVEL = "WARNING"  # Reduce noisy request logs
