from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

from aoss_rag.errors import ConfigurationError


DEFAULT_CONFIG_PATH = Path("config.toml")


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load the application config (``config.toml`` by default).

    ``AOSS_RAG_CONFIG`` overrides the default location. Returns an empty dict
    when the file is missing so callers can fall back to environment
    variables.
    """
    if path is None:
        path = os.getenv("AOSS_RAG_CONFIG") or DEFAULT_CONFIG_PATH
    target = Path(path)
    if not target.is_file():
        return {}

    try:
        with target.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid config file {target}: {exc}") from exc


def section(config: dict | None, *keys: str) -> Dict[str, Any]:
    """Return the nested ``[aoss_rag.<keys>]`` table, or an empty dict."""
    node: Any = (config or {}).get("aoss_rag", {})
    for key in keys:
        node = node.get(key, {}) if isinstance(node, dict) else {}
    return node if isinstance(node, dict) else {}


def as_int(name: str, raw: Any, *, minimum: int | None = None) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def as_float(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


__all__ = ["load_raw_config", "section", "as_int", "as_float", "DEFAULT_CONFIG_PATH"]
