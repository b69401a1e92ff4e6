"""Navigation settings and their JSON loader.

Settings are read once per navigation. Every field degrades to its default
when the configured value is missing or unusable, so a bad settings file
never blocks navigation.

Keys (optionally nested under ``"gotoCharTimer"``)::

    charset           label alphabet, trimmed and de-duplicated (>= 2 symbols)
    timeout           debounce window for the search stage, in milliseconds
    labelTimeout      optional idle window for the label stage (null = none)
    extendSelection   keep the selection anchor and extend to the target
    searchPrompt      prompt shown by the search input
    labelPrompt       prompt shown by the label input

Snake-case spellings (``timeout_ms``, ``label_timeout_ms``, ...) are accepted
as well.
"""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gotochar.io_utils import load_json

log = logging.getLogger(__name__)

DEFAULT_CHARSET = "abcdefghijklmnopqrstuvwxyz"
DEFAULT_TIMEOUT_MS = 800
DEFAULT_SEARCH_PROMPT = "Enter a string to search for"
DEFAULT_LABEL_PROMPT = "Enter a label to jump to"
CONFIG_ENV_VAR = "GOTOCHAR_CONFIG"
SETTINGS_NAMESPACE = "gotoCharTimer"

_ALIASES: dict[str, tuple[str, ...]] = {
    "charset": ("charset",),
    "timeout_ms": ("timeout", "timeout_ms", "timeoutMs"),
    "label_timeout_ms": ("labelTimeout", "label_timeout_ms", "labelTimeoutMs"),
    "extend_selection": ("extendSelection", "extend_selection"),
    "search_prompt": ("searchPrompt", "search_prompt"),
    "label_prompt": ("labelPrompt", "label_prompt"),
}


@dataclass(frozen=True, slots=True)
class JumpConfig:
    charset: str = DEFAULT_CHARSET
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    label_timeout_ms: int | None = None
    extend_selection: bool = False
    search_prompt: str = DEFAULT_SEARCH_PROMPT
    label_prompt: str = DEFAULT_LABEL_PROMPT

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def label_timeout_s(self) -> float | None:
        if self.label_timeout_ms is None:
            return None
        return self.label_timeout_ms / 1000.0


def normalize_charset(raw: Any) -> str:
    """Trim and de-duplicate a label alphabet, falling back to a-z.

    Order of first occurrence is kept. Fewer than two distinct symbols
    cannot form unique labels, so such values fall back to the default.
    """
    if not isinstance(raw, str):
        return DEFAULT_CHARSET
    symbols = "".join(dict.fromkeys(raw.strip()))
    if len(symbols) < 2:
        return DEFAULT_CHARSET
    return symbols


def _positive_int(raw: Any) -> int | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw) or raw != int(raw) or raw <= 0:
        return None
    return int(raw)


def _lookup(payload: dict[str, Any], name: str) -> Any:
    for key in _ALIASES[name]:
        if key in payload:
            return payload[key]
    return None


def config_from_dict(payload: dict[str, Any]) -> JumpConfig:
    """Build a JumpConfig from a settings mapping, ignoring unknown keys."""
    nested = payload.get(SETTINGS_NAMESPACE)
    if isinstance(nested, dict):
        payload = nested

    timeout_ms = _positive_int(_lookup(payload, "timeout_ms"))
    if timeout_ms is None:
        raw = _lookup(payload, "timeout_ms")
        if raw is not None:
            log.warning("Ignoring invalid timeout %r, using %d ms", raw, DEFAULT_TIMEOUT_MS)
        timeout_ms = DEFAULT_TIMEOUT_MS

    raw_label_timeout = _lookup(payload, "label_timeout_ms")
    label_timeout_ms = _positive_int(raw_label_timeout)
    if label_timeout_ms is None and raw_label_timeout is not None:
        log.warning("Ignoring invalid label timeout %r", raw_label_timeout)

    search_prompt = _lookup(payload, "search_prompt")
    label_prompt = _lookup(payload, "label_prompt")
    return JumpConfig(
        charset=normalize_charset(_lookup(payload, "charset")),
        timeout_ms=timeout_ms,
        label_timeout_ms=label_timeout_ms,
        extend_selection=_lookup(payload, "extend_selection") is True,
        search_prompt=search_prompt if isinstance(search_prompt, str) else DEFAULT_SEARCH_PROMPT,
        label_prompt=label_prompt if isinstance(label_prompt, str) else DEFAULT_LABEL_PROMPT,
    )


def load_config(path: Path | None = None) -> JumpConfig:
    """Load settings from ``path``, ``$GOTOCHAR_CONFIG``, or defaults.

    Raises:
        FileNotFoundError: the settings file does not exist.
        ValueError: the file does not hold a JSON object.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
        if not env_path:
            return JumpConfig()
        path = Path(env_path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Settings payload must be a JSON object: {path}")
    config = config_from_dict(payload)
    log.debug("loaded settings from %s: %s", path, config)
    return config
