import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_TODOS_FILE = os.path.join(".", "data.json")


def load_env_from_dotenv(dotenv_path: str = ".env") -> None:
    """
    Minimal .env loader (no external packages).
    Supports lines like: KEY=value or KEY="value with spaces".
    Existing environment variables are not overridden.
    """
    if not os.path.isfile(dotenv_path):
        return
    try:
        with open(dotenv_path, "r", encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip()
                if (val.startswith('"') and val.endswith('"')) or (val.startswith("'") and val.endswith("'")):
                    val = val[1:-1]
                if key and key not in os.environ:
                    os.environ[key] = val
    except (OSError, UnicodeDecodeError) as e:
        # A broken .env must not keep the service from starting
        logger.warning("Skipping %s: %s", dotenv_path, e)


def get_port() -> int:
    """PORT from the environment; unset or empty means 3000."""
    port = os.getenv("PORT", "").strip()
    if not port:
        return DEFAULT_PORT
    return int(port)


def get_host() -> str:
    return os.getenv("HOST", "").strip() or DEFAULT_HOST


def get_todos_file() -> str:
    return os.getenv("TODOS_FILE", "").strip() or DEFAULT_TODOS_FILE


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL", "").strip() or "INFO").upper()
