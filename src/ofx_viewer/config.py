"""Configuration utilities and dataclasses for the OFX viewer."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ofx_viewer.header import VersionPolicy

DEFAULT_CONFIG_PATH: Path = Path.home() / '.config/ofx_viewer.toml'
"""Default location for the user provided TOML configuration file."""

BASE_SETTINGS: dict[str, Any] = {
    'policy': {
        'header_format': '100',
        'version': '102',
    },
    'fallback_encoding': 'cp1252',
    'request_timeout': 30,
    'ca_cert_path': None,
    'display': {
        'date_format': '%Y-%m-%d',
        'preview_limit': 0,
    },
}
"""Default settings merged with any local overrides."""


@dataclass(frozen=True, slots=True)
class ViewerSettings:
    """Structured settings for loading, decoding and displaying statements."""

    policy: VersionPolicy
    fallback_encoding: str
    request_timeout: int
    ca_cert_path: Path | None
    date_format: str
    preview_limit: int


def _merge_dict(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, returning a new dictionary."""

    merged: dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = _merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


def _prepare_settings(raw: Mapping[str, Any]) -> ViewerSettings:
    """Convert a raw dictionary into ``ViewerSettings`` with proper types."""

    ca_path = raw.get('ca_cert_path')
    resolved_ca = Path(ca_path).expanduser() if isinstance(ca_path, str) and ca_path else None
    policy = dict(raw.get('policy', {}))
    display = dict(raw.get('display', {}))
    return ViewerSettings(
        policy=VersionPolicy(
            header_format=str(policy.get('header_format', '100')),
            version=str(policy.get('version', '102')),
        ),
        fallback_encoding=str(raw.get('fallback_encoding', 'cp1252')),
        request_timeout=int(raw.get('request_timeout', 30)),
        ca_cert_path=resolved_ca,
        date_format=str(display.get('date_format', '%Y-%m-%d')),
        preview_limit=int(display.get('preview_limit', 0)),
    )


def default_settings() -> ViewerSettings:
    """Return the built-in settings without reading any file."""

    return _prepare_settings(BASE_SETTINGS)


def load_settings(path: Path | None = None) -> ViewerSettings:
    """Load ``ViewerSettings`` from the provided TOML file path.

    An explicit ``path`` must exist; when it is omitted and the default file is
    absent the built-in defaults are returned.
    """

    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.is_file():
        if path is None:
            return default_settings()
        raise FileNotFoundError(f'Configuration file not found: {config_path}')

    with config_path.open('rb') as handle:
        overrides = tomllib.load(handle)

    return _prepare_settings(_merge_dict(BASE_SETTINGS, overrides))
