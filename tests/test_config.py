"""Tests for gotochar.config — settings normalization and loading."""
from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from gotochar.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CHARSET,
    DEFAULT_TIMEOUT_MS,
    JumpConfig,
    config_from_dict,
    load_config,
    normalize_charset,
)


# ── normalize_charset ─────────────────────────────────────────────────


class TestNormalizeCharset:
    def test_trims(self) -> None:
        assert normalize_charset("  asdf ") == "asdf"

    @pytest.mark.parametrize("raw", ["", "   ", "x", " y ", None, 42])
    def test_falls_back_to_default(self, raw: object) -> None:
        assert normalize_charset(raw) == DEFAULT_CHARSET

    def test_removes_duplicates_keeping_order(self) -> None:
        assert normalize_charset("hjklhj") == "hjkl"

    def test_duplicates_only_falls_back(self) -> None:
        assert normalize_charset("aaaa") == DEFAULT_CHARSET


# ── config_from_dict ──────────────────────────────────────────────────


class TestConfigFromDict:
    def test_defaults(self) -> None:
        config = config_from_dict({})
        assert config == JumpConfig()
        assert config.timeout_ms == DEFAULT_TIMEOUT_MS
        assert config.timeout_s == pytest.approx(0.8)
        assert config.label_timeout_s is None

    def test_namespaced_camel_case(self) -> None:
        config = config_from_dict({
            "gotoCharTimer": {
                "charset": "asdfjkl",
                "timeout": 300,
                "labelTimeout": 1500,
                "extendSelection": True,
                "searchPrompt": "Find",
            },
        })
        assert config.charset == "asdfjkl"
        assert config.timeout_ms == 300
        assert config.label_timeout_s == pytest.approx(1.5)
        assert config.extend_selection is True
        assert config.search_prompt == "Find"
        assert config.label_prompt == JumpConfig().label_prompt

    def test_snake_case(self) -> None:
        config = config_from_dict({"timeout_ms": 250, "label_timeout_ms": 900})
        assert config.timeout_ms == 250
        assert config.label_timeout_ms == 900

    @pytest.mark.parametrize("raw", [0, -5, "800", 12.5, True, None, float("inf")])
    def test_invalid_timeout_falls_back(self, raw: object) -> None:
        assert config_from_dict({"timeout": raw}).timeout_ms == DEFAULT_TIMEOUT_MS

    def test_integral_float_timeout_accepted(self) -> None:
        assert config_from_dict({"timeout": 500.0}).timeout_ms == 500

    def test_invalid_label_timeout_disables_it(self) -> None:
        assert config_from_dict({"labelTimeout": -1}).label_timeout_ms is None

    def test_extend_selection_requires_true(self) -> None:
        assert config_from_dict({"extendSelection": "yes"}).extend_selection is False

    def test_unknown_keys_ignored(self) -> None:
        assert config_from_dict({"theme": "dark"}) == JumpConfig()


# ── load_config ───────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_path_or_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == JumpConfig()

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_bytes(orjson.dumps({"charset": "qwer", "timeout": 120}))
        config = load_config(path)
        assert config.charset == "qwer"
        assert config.timeout_ms == 120

    def test_reads_env_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "settings.json"
        path.write_bytes(orjson.dumps({"gotoCharTimer": {"timeout": 42}}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().timeout_ms == 42

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")

    def test_non_object_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_bytes(b"[1, 2, 3]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)
