"""CRM webhook forwarder.

Posts ``{"eventType": ..., "timestamp": ..., **payload}`` to a lead-capture
webhook. Any 2xx response counts as delivered.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from ..models import DealAnalysis
from .base import ConnectorResult, HTTPConnector

DEAL_ANALYZED = "deal.analyzed"
WORKSHEET_SUBMITTED = "worksheet.submitted"


@dataclass
class WebhookResult(ConnectorResult):
    """Delivery outcome for one webhook event."""

    event: str = ""
    status_code: int | None = None


class CRMWebhookConnector(HTTPConnector):
    """Fire-and-forget event delivery to the CRM webhook."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, transport=transport)
        self.url = url

    @property
    def source_name(self) -> str:
        return "crm_webhook"

    def send_event(self, event: str, payload: dict[str, Any]) -> WebhookResult:
        """Send one event. Never raises; check ``result.success``."""
        result = WebhookResult(source=self.source_name, event=event)
        if not self.url:
            return self._fail(result, "CRM webhook URL not set. Set CRM_WEBHOOK_URL or crm_webhook.url.")

        body = {
            "eventType": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
        try:
            with self._client() as client:
                resp = client.post(self.url, json=body)
        except httpx.HTTPError as e:
            return self._fail(result, f"{event}: {e!s}")

        result.status_code = resp.status_code
        if not resp.is_success:
            return self._fail(result, f"{event}: HTTP {resp.status_code}")
        result.success = True
        return result

    def send_deal_analysis(self, analysis: DealAnalysis) -> WebhookResult:
        """Forward a finished analysis as a ``deal.analyzed`` event."""
        deal = analysis.deal
        calc = analysis.calculations
        return self.send_event(
            DEAL_ANALYZED,
            {
                "propertyAddress": deal.property_info.full_address,
                "propertyType": deal.property_info.property_type,
                "purchasePrice": deal.pricing.purchase_price,
                "arv": deal.pricing.arv,
                "loanAmount": deal.financing.loan_amount,
                "signal": analysis.signal.value,
                "rating": analysis.grade.value,
                "roi": round(calc.roi, 2),
                "projectedProfit": calc.total_profit,
            },
        )

    def submit_worksheet(
        self,
        analysis: DealAnalysis,
        worksheet: str,
        client_name: str = "",
        client_email: str = "",
    ) -> WebhookResult:
        """Forward a rendered worksheet as a ``worksheet.submitted`` event."""
        calc = analysis.calculations
        return self.send_event(
            WORKSHEET_SUBMITTED,
            {
                "form_type": "Deal Analyzer Worksheet",
                "client_name": client_name,
                "client_email": client_email,
                "property_address": analysis.deal.property_info.full_address,
                "signal": analysis.signal.value,
                "roi": f"{calc.roi:.1f}",
                "projected_profit": calc.total_profit,
                "note_content": worksheet,
            },
        )
