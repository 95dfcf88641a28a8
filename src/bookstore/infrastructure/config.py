"""Runtime settings, read from ``BOOKSTORE_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from bookstore.domain.exceptions import ValidationError

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

BACKENDS = ("json", "mongo")


@dataclass(frozen=True)
class Settings:
    backend: str = "json"
    data_dir: Path = DEFAULT_DATA_DIR
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db: str = "bookstore"
    tx_timeout_ms: int = 5000
    tx_max_retries: int = 3
    tx_retry_delay: float = 0.5
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        backend = env.get("BOOKSTORE_BACKEND", "json").strip().lower()
        if backend not in BACKENDS:
            raise ValidationError(
                f"BOOKSTORE_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'"
            )

        return Settings(
            backend=backend,
            data_dir=Path(env.get("BOOKSTORE_DATA_DIR", str(DEFAULT_DATA_DIR))),
            mongo_url=env.get("BOOKSTORE_MONGO_URL", "mongodb://localhost:27017"),
            mongo_db=env.get("BOOKSTORE_MONGO_DB", "bookstore"),
            tx_timeout_ms=_int(env, "BOOKSTORE_TX_TIMEOUT_MS", 5000, minimum=1),
            tx_max_retries=_int(env, "BOOKSTORE_TX_MAX_RETRIES", 3, minimum=1),
            tx_retry_delay=_float(env, "BOOKSTORE_TX_RETRY_DELAY", 0.5),
            environment=env.get("BOOKSTORE_ENV", "development").strip().lower(),
        )


def _int(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{key} must be an integer, got '{raw}'")
    if value < minimum:
        raise ValidationError(f"{key} must be at least {minimum}, got {value}")
    return value


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{key} must be a number, got '{raw}'")
    if value < 0:
        raise ValidationError(f"{key} cannot be negative, got {value}")
    return value


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
