import logging
import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_MODEL = "claude-opus-4-6"
DEFAULT_MAX_TOKENS = 8000


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    runs_dir: str = "runs"
    log_level: str = "WARNING"


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from exc


def load_settings() -> Settings:
    """Read settings from the environment, after loading a local .env file.

    A missing ANTHROPIC_API_KEY is not an error here; the completion call
    reports it when the client is built.
    """
    load_dotenv()
    return Settings(
        api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        model=os.getenv("ISOFORGE_MODEL") or DEFAULT_MODEL,
        max_tokens=_read_int("ISOFORGE_MAX_TOKENS", DEFAULT_MAX_TOKENS),
        runs_dir=os.getenv("ISOFORGE_RUNS_DIR") or "runs",
        log_level=os.getenv("ISOFORGE_LOG_LEVEL") or "WARNING",
    )


def setup_logging(level: str = "WARNING") -> None:
    log_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # Reduce noise from the SDK's transport
    for noisy in ("httpx", "httpcore", "anthropic"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))
