"""Configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"


@dataclass
class WebhookSettings:
    """CRM webhook forwarder settings."""

    url: str
    timeout_seconds: float


@dataclass
class ValuationSettings:
    """Property valuation (AVM) lookup settings."""

    base_url: str
    api_key: str
    comp_count: int
    timeout_seconds: float


@dataclass
class LLMSettings:
    """Hosted LLM chat endpoint settings."""

    base_url: str
    api_key: str
    model: str
    timeout_seconds: float
    temperature: float


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file.

    An explicit path must exist. Without one, the bundled ``config.yaml`` is
    used when present, otherwise an empty config (built-in defaults apply).
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
    else:
        path = _DEFAULT_CONFIG_PATH
        if not path.exists():
            return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def get_deal_defaults(config: dict[str, Any]) -> dict[str, Any]:
    """Form defaults (camelCase keys) applied to a new deal."""
    defaults = config.get("deal_defaults", {})
    return dict(defaults) if isinstance(defaults, dict) else {}


def get_webhook_settings(config: dict[str, Any]) -> WebhookSettings:
    """Extract CRM webhook settings. CRM_WEBHOOK_URL overrides the file."""
    wh = config.get("crm_webhook", {})
    return WebhookSettings(
        url=os.environ.get("CRM_WEBHOOK_URL") or str(wh.get("url", "") or ""),
        timeout_seconds=float(wh.get("timeout_seconds", 10)),
    )


def get_valuation_settings(config: dict[str, Any]) -> ValuationSettings:
    """Extract valuation lookup settings. RENTCAST_API_KEY supplies the key."""
    val = config.get("valuation", {})
    return ValuationSettings(
        base_url=str(val.get("base_url", "https://api.rentcast.io/v1")).rstrip("/"),
        api_key=os.environ.get("RENTCAST_API_KEY", ""),
        comp_count=int(val.get("comp_count", 5)),
        timeout_seconds=float(val.get("timeout_seconds", 15)),
    )


def get_llm_settings(config: dict[str, Any]) -> LLMSettings:
    """Extract LLM narrative settings. LLM_API_KEY supplies the key."""
    llm = config.get("llm", {})
    return LLMSettings(
        base_url=str(llm.get("base_url", "https://api.openai.com/v1")).rstrip("/"),
        api_key=os.environ.get("LLM_API_KEY", ""),
        model=str(llm.get("model", "gpt-4o-mini")),
        timeout_seconds=float(llm.get("timeout_seconds", 30)),
        temperature=float(llm.get("temperature", 0.3)),
    )


def get_storage_path(config: dict[str, Any]) -> Path:
    """Path of the saved-deals database."""
    st = config.get("storage", {})
    return Path(st.get("db_path", "output/cookin_deal.duckdb"))
