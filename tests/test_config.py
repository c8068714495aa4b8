"""Tests for configuration loading."""

from pathlib import Path

import pytest

from cookin_deal.config import (
    get_deal_defaults,
    get_llm_settings,
    get_storage_path,
    get_valuation_settings,
    get_webhook_settings,
    load_config,
)


class TestConfig:
    """Tests for config.yaml loading and accessors."""

    def test_bundled_config(self) -> None:
        cfg = load_config()
        defaults = get_deal_defaults(cfg)
        assert defaults["interestRate"] == 12
        assert defaults["holdingPeriodMonths"] == 6

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_accessor_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("CRM_WEBHOOK_URL", "RENTCAST_API_KEY", "LLM_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        assert get_deal_defaults({}) == {}
        assert get_webhook_settings({}).url == ""
        assert get_valuation_settings({}).comp_count == 5
        assert get_llm_settings({}).model == "gpt-4o-mini"
        assert get_storage_path({}) == Path("output/cookin_deal.duckdb")

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRM_WEBHOOK_URL", "https://crm.test/env")
        monkeypatch.setenv("RENTCAST_API_KEY", "rc-key")
        monkeypatch.setenv("LLM_API_KEY", "llm-key")
        cfg = {"crm_webhook": {"url": "https://crm.test/file", "timeout_seconds": 3}}
        webhook = get_webhook_settings(cfg)
        assert webhook.url == "https://crm.test/env"
        assert webhook.timeout_seconds == 3
        assert get_valuation_settings({}).api_key == "rc-key"
        assert get_llm_settings({}).api_key == "llm-key"

    def test_file_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "storage:\n  db_path: data/deals.duckdb\n"
            "llm:\n  base_url: https://llm.test/v1/\n  temperature: 0.7\n"
        )
        cfg = load_config(path)
        assert get_storage_path(cfg) == Path("data/deals.duckdb")
        llm = get_llm_settings(cfg)
        assert llm.base_url == "https://llm.test/v1"
        assert llm.temperature == 0.7
