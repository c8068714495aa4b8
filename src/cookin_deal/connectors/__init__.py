"""Connectors for external collaborators (CRM, valuation, LLM)."""

from .base import ConnectorResult, HTTPConnector
from .crm_webhook import CRMWebhookConnector, WebhookResult
from .llm import LLMConnector, NarrativeResult, build_narrative_prompt
from .valuation import Comparable, PropertyValuationConnector, ValuationResult

__all__ = [
    "ConnectorResult",
    "HTTPConnector",
    "CRMWebhookConnector",
    "WebhookResult",
    "LLMConnector",
    "NarrativeResult",
    "build_narrative_prompt",
    "Comparable",
    "PropertyValuationConnector",
    "ValuationResult",
]
