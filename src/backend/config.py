"""Load backend connection settings from TOML with environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import tomllib

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "backend" / "default.toml"

BASE_URL_ENV = "G5API_BASE_URL"
API_KEY_ENV = "G5API_KEY"


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for the match-tracking backend."""

    base_url: str
    api_key: str = ""
    timeout_seconds: float = 15.0
    batch_size: int = 10
    bulk_batch_size: int = 15
    file_path: Path | None = None


def load_backend_config(
    file_path: Path = DEFAULT_CONFIG_PATH,
    *,
    environ: Mapping[str, str] | None = None,
) -> BackendConfig:
    """Load and validate backend settings from a TOML file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return parse_backend_config(raw, file_path, environ=os.environ if environ is None else environ)


def parse_backend_config(
    raw: dict[str, Any],
    file_path: Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> BackendConfig:
    backend_raw = raw.get("backend", {})
    environ = environ or {}

    base_url = str(environ.get(BASE_URL_ENV) or backend_raw.get("base_url", "")).strip().rstrip("/")
    if not base_url:
        raise ValueError(f"{file_path}: [backend].base_url is required (or set {BASE_URL_ENV})")
    if not base_url.startswith(("http://", "https://")):
        raise ValueError(f"{file_path}: [backend].base_url must be an http(s) URL")

    api_key = str(environ.get(API_KEY_ENV) or backend_raw.get("api_key", ""))

    timeout_seconds = float(backend_raw.get("timeout_seconds", 15.0))
    if timeout_seconds <= 0.0:
        raise ValueError(f"{file_path}: [backend].timeout_seconds must be > 0")

    batch_size = int(backend_raw.get("batch_size", 10))
    if batch_size <= 0:
        raise ValueError(f"{file_path}: [backend].batch_size must be > 0")

    bulk_batch_size = int(backend_raw.get("bulk_batch_size", 15))
    if bulk_batch_size <= 0:
        raise ValueError(f"{file_path}: [backend].bulk_batch_size must be > 0")

    return BackendConfig(
        base_url=base_url,
        api_key=api_key,
        timeout_seconds=timeout_seconds,
        batch_size=batch_size,
        bulk_batch_size=bulk_batch_size,
        file_path=file_path,
    )


__all__ = [
    "API_KEY_ENV",
    "BASE_URL_ENV",
    "BackendConfig",
    "DEFAULT_CONFIG_PATH",
    "load_backend_config",
    "parse_backend_config",
]
