"""Shared constants and configuration for the blog server.

Each value is resolved from an environment variable first, then from the JSON
settings file, then from a built-in default.
"""

import json
import os

_SETTINGS_FILE = os.path.expanduser(
    os.environ.get("BLOG_SETTINGS", "~/.config/markdown-blog/settings.json")
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _read_setting(*keys, default=None):
    """Read a nested setting from the settings file."""
    try:
        with open(_SETTINGS_FILE) as f:
            data = json.load(f)
        for k in keys:
            data = data[k]
        return data
    except (FileNotFoundError, json.JSONDecodeError, KeyError, TypeError):
        return default


def _setting(env_name: str, *keys, default=None):
    """Environment variable, else settings-file value at *keys*, else default."""
    value = os.environ.get(env_name)
    if value:
        return value
    return _read_setting(*keys, default=default)


def _int_setting(env_name: str, *keys, default: int) -> int:
    try:
        return int(_setting(env_name, *keys, default=default))
    except (TypeError, ValueError):
        return default


def _bool_setting(env_name: str, *keys, default: bool) -> bool:
    value = _setting(env_name, *keys, default=default)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _ignore_setting() -> str:
    value = _setting("CACHE_IGNORE", "cache", "ignore", default="")
    # The settings file may hold a list of patterns instead of a joined string.
    if isinstance(value, list):
        return ";".join(str(v) for v in value)
    return value or ""


S3_BUCKET = _setting("S3_BUCKET", "s3", "bucket", default="blogs")
S3_ENDPOINT = _setting("S3_ENDPOINT", "s3", "endpoint", default=None)
S3_REGION = _setting("S3_REGION", "s3", "region", default=None)
S3_ACCESS_KEY_ID = _setting("S3_ACCESS_KEY_ID", "s3", "access_key_id", default="")
S3_SECRET_ACCESS_KEY = _setting("S3_SECRET_ACCESS_KEY", "s3", "secret_access_key", default="")

CACHE_IGNORE = _ignore_setting()
CACHE_TTL_SECONDS = _int_setting("CACHE_TTL_SECONDS", "cache", "ttl_seconds", default=300)
EXCERPT_LENGTH = _int_setting("EXCERPT_LENGTH", "cache", "excerpt_length", default=150)
FETCH_WORKERS = _int_setting("FETCH_WORKERS", "cache", "fetch_workers", default=8)

ASSET_BASE_URL = _setting(
    "ASSET_BASE_URL",
    "content",
    "asset_base_url",
    default=f"{S3_ENDPOINT.rstrip('/')}/{S3_BUCKET}" if S3_ENDPOINT else "",
)
RESOLVE_WIKILINKS = _bool_setting("RESOLVE_WIKILINKS", "content", "resolve_wikilinks", default=True)

DOCUMENT_SUFFIX = ".md"
FRONTEND_DIR = os.path.join(os.path.dirname(__file__), "frontend", "dist")
PORT = _int_setting("PORT", "server", "port", default=3000)
