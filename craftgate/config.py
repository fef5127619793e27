import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent


def load_local_env() -> None:
    """
    Load environment variables from a local .env file if present without
    overriding variables that are already set.
    """
    env_path = PACKAGE_DIR / ".env"
    if not env_path.exists():
        return

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key and key not in os.environ:
            os.environ[key] = value.strip().strip("'").strip('"')


# Load .env immediately on import so other modules see values in os.environ
load_local_env()


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    docker_binary: str = "docker"
    command_timeout: float = 300.0
    static_dir: Path = PACKAGE_DIR / "public"
    log_level: str = "INFO"


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer, got {raw!r}") from None


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number, got {raw!r}") from None


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        host=os.environ.get("CRAFTGATE_HOST", defaults.host),
        port=_env_int("CRAFTGATE_PORT", defaults.port),
        reload=os.environ.get("CRAFTGATE_RELOAD", "false").lower() == "true",
        docker_binary=os.environ.get("CRAFTGATE_DOCKER_BINARY", defaults.docker_binary),
        command_timeout=_env_float("CRAFTGATE_COMMAND_TIMEOUT", defaults.command_timeout),
        static_dir=Path(os.environ.get("CRAFTGATE_STATIC_DIR", str(defaults.static_dir))),
        log_level=os.environ.get("CRAFTGATE_LOG_LEVEL", defaults.log_level).upper(),
    )


def validate_settings(settings: Settings) -> None:
    """
    Ensure settings are usable; raise early if they are not.
    """
    if not 1 <= settings.port <= 65535:
        raise RuntimeError(f"CRAFTGATE_PORT out of range: {settings.port}")
    if settings.command_timeout <= 0:
        raise RuntimeError("CRAFTGATE_COMMAND_TIMEOUT must be positive")
    if not settings.docker_binary:
        raise RuntimeError("CRAFTGATE_DOCKER_BINARY must not be empty")
    if shutil.which(settings.docker_binary) is None:
        # Not fatal: every request will report the spawn failure instead.
        log.warning(
            "Container runtime binary %r not found on PATH. Mount the docker "
            "client and socket into this container.",
            settings.docker_binary,
        )
