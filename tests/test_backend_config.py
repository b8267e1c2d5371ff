"""Tests for TOML-based backend config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from backend.config import DEFAULT_CONFIG_PATH, load_backend_config


def _write(tmp_path: Path, body: str) -> Path:
    config_path = tmp_path / "backend.toml"
    config_path.write_text(body.strip())
    return config_path


def test_load_backend_config_from_file(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path,
        """
[backend]
base_url = "https://g5api.example.com/"
api_key = "secret"
timeout_seconds = 5.5
batch_size = 4
bulk_batch_size = 6
""",
    )
    config = load_backend_config(config_path, environ={})

    assert config.base_url == "https://g5api.example.com"
    assert config.api_key == "secret"
    assert config.timeout_seconds == pytest.approx(5.5)
    assert config.batch_size == 4
    assert config.bulk_batch_size == 6
    assert config.file_path == config_path


def test_defaults_apply_when_keys_omitted(tmp_path: Path) -> None:
    config_path = _write(tmp_path, '[backend]\nbase_url = "http://localhost:3301"')
    config = load_backend_config(config_path, environ={})
    assert config.api_key == ""
    assert config.batch_size == 10
    assert config.bulk_batch_size == 15


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path,
        """
[backend]
base_url = "http://localhost:3301"
api_key = "file-key"
""",
    )
    config = load_backend_config(
        config_path,
        environ={
            "G5API_BASE_URL": "https://prod.example.com//",
            "G5API_KEY": "env-key",
        },
    )
    assert config.base_url == "https://prod.example.com"
    assert config.api_key == "env-key"


def test_base_url_is_required(tmp_path: Path) -> None:
    config_path = _write(tmp_path, "[backend]\napi_key = 'x'")
    with pytest.raises(ValueError, match=r"\[backend\].base_url is required"):
        load_backend_config(config_path, environ={})


def test_base_url_must_be_http(tmp_path: Path) -> None:
    config_path = _write(tmp_path, "[backend]\nbase_url = 'ftp://example.com'")
    with pytest.raises(ValueError, match=r"\[backend\].base_url must be an http\(s\) URL"):
        load_backend_config(config_path, environ={})


@pytest.mark.parametrize(
    ("key", "value"),
    [("timeout_seconds", "0"), ("batch_size", "0"), ("bulk_batch_size", "-1")],
)
def test_invalid_numbers_raise(tmp_path: Path, key: str, value: str) -> None:
    config_path = _write(tmp_path, f"[backend]\nbase_url = 'http://x'\n{key} = {value}")
    with pytest.raises(ValueError, match=rf"\[backend\].{key} must be > 0"):
        load_backend_config(config_path, environ={})


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_backend_config(tmp_path / "missing.toml", environ={})


def test_shipped_default_config_loads() -> None:
    config = load_backend_config(DEFAULT_CONFIG_PATH, environ={})
    assert config.batch_size == 10
    assert config.bulk_batch_size == 15
