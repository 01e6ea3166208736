"""
Application configuration.

Values come from the environment, optionally seeded from a .env file in the
working directory. The hosted data service credentials are opaque to the rest
of the app; only db.repository.open_repository looks at them.
"""

import os
from dataclasses import dataclass
from typing import Literal, Optional

from dotenv import load_dotenv

from utils.errors import ConfigurationError
from utils.logger import get_logger

_logger = get_logger(__name__)

BACKENDS = ("local", "hosted", "auto")

DEFAULT_DB_PATH = "data/db.sqlite"
DEFAULT_STORAGE_PATH = "data/local_storage.json"
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class AppConfig:
    backend: Literal["local", "hosted"]
    db_path: str
    storage_path: str
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(key)
    return value if value else default


def _resolve_backend(requested: str, url: Optional[str], key: Optional[str]) -> str:
    if requested not in BACKENDS:
        raise ConfigurationError(
            f"INVMGR_BACKEND must be one of {', '.join(BACKENDS)}, got {requested!r}"
        )

    has_hosted = bool(url and key)
    if requested == "hosted" and not has_hosted:
        raise ConfigurationError(
            "INVMGR_BACKEND=hosted requires SUPABASE_URL and SUPABASE_ANON_KEY. "
            "Please add them to your .env file."
        )
    if requested == "auto":
        if has_hosted:
            return "hosted"
        _logger.warning(
            "Missing Supabase environment variables, using the local database."
        )
        return "local"
    return requested


def load_config() -> AppConfig:
    """
    Load configuration from the environment (and .env, if present).

    Raises:
        ConfigurationError: unknown backend, hosted backend without
            credentials, or a non-numeric timeout.
    """
    load_dotenv()

    url = _get_optional_env("SUPABASE_URL")
    key = _get_optional_env("SUPABASE_ANON_KEY")
    backend = _resolve_backend(
        _get_optional_env("INVMGR_BACKEND", "auto").strip().lower(), url, key
    )

    raw_timeout = _get_optional_env("INVMGR_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError(
            f"INVMGR_HTTP_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
        ) from None

    return AppConfig(
        backend=backend,
        db_path=_get_optional_env("INVMGR_DB_PATH", DEFAULT_DB_PATH),
        storage_path=_get_optional_env("INVMGR_STORAGE_PATH", DEFAULT_STORAGE_PATH),
        supabase_url=url.rstrip("/") if url else None,
        supabase_key=key,
        http_timeout=timeout,
    )
