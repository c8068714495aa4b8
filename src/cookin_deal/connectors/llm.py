"""Hosted LLM client for deal narratives.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint with
``stream: true`` and reads server-sent events: ``data: {...}`` chunks carrying
``choices[0].delta.content`` (text) or ``delta.tool_calls`` (structured tool
results), terminated by ``data: [DONE]``.

The model only narrates. All numbers in the prompt come from the valuation
engine.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from ..models import DealAnalysis
from ..underwriting import ltv, within_seventy_percent_rule
from .base import ConnectorResult, HTTPConnector

NARRATIVE_SYSTEM_PROMPT = (
    "You are the deal analyst for a real estate lender. "
    "Summarize the fix-and-flip analysis you are given for an investor. "
    "Use only the numbers provided and do not recalculate them. "
    "State the signal and grade as given, call out the biggest risks, "
    "and end with one clear next step."
)


@dataclass
class NarrativeResult(ConnectorResult):
    """Streamed text plus any structured tool calls."""

    text: str = ""
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def _fmt_money(value: float) -> str:
    return f"-${abs(value):,.0f}" if value < 0 else f"${value:,.0f}"


def build_narrative_prompt(analysis: DealAnalysis) -> str:
    """User message describing an analysis, numbers pre-computed."""
    deal = analysis.deal
    calc = analysis.calculations
    within = within_seventy_percent_rule(deal, calc)
    lines = [
        f"Property: {deal.property_info.full_address or 'address not provided'} "
        f"({deal.property_info.property_type}, {deal.property_info.bedrooms} bd / "
        f"{deal.property_info.bathrooms} ba, {deal.property_info.sqft:,.0f} sqft)",
        f"Purchase price: {_fmt_money(deal.pricing.purchase_price)}",
        f"ARV: {_fmt_money(deal.pricing.arv)}",
        f"Total rehab: {_fmt_money(calc.total_rehab_cost)}",
        f"Financing: {deal.financing.financing_type.value}, loan {_fmt_money(deal.financing.loan_amount)} "
        f"at {deal.financing.interest_rate}% for {deal.financing.loan_term_months} months, "
        f"{deal.financing.loan_points} points (LTV {ltv(deal):.1f}%)",
        f"Holding: {_fmt_money(calc.total_holding_costs)} over {deal.holding.holding_period_months} months",
        f"Buying costs: {_fmt_money(calc.total_buying_costs)}",
        f"Selling costs: {_fmt_money(calc.total_selling_costs)}",
        f"Total investment: {_fmt_money(calc.total_investment)}",
        f"Projected profit: {_fmt_money(calc.total_profit)}",
        f"ROI: {calc.roi:.2f}%",
        f"Purchase as % of ARV: {calc.percent_of_arv:.1f}%",
        f"Max allowable offer (70% rule): {_fmt_money(calc.max_allowable_offer)} "
        f"({'within' if within else 'exceeds'} the rule)",
        f"Cash needed: {_fmt_money(calc.cash_needed)}",
        f"Signal: {analysis.signal.value}",
        f"Grade: {analysis.grade.value}",
    ]
    return "Summarize this deal analysis:\n" + "\n".join(f"- {line}" for line in lines)


class LLMConnector(HTTPConnector):
    """Streaming chat client for an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, transport=transport)
        self.api_key = api_key or os.environ.get("LLM_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature

    @property
    def source_name(self) -> str:
        return "llm"

    def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str = NARRATIVE_SYSTEM_PROMPT,
        on_text: Callable[[str], None] | None = None,
    ) -> NarrativeResult:
        """Send history + system prompt; stream the reply.

        ``on_text`` receives each text delta as it arrives. Never raises:
        on failure the result carries whatever text arrived plus ``errors``.
        """
        result = NarrativeResult(source=self.source_name)
        if not self.api_key:
            return self._fail(result, "LLM_API_KEY not set. Set env var or pass api_key.")

        payload = {
            "model": self.model,
            "stream": True,
            "temperature": self.temperature,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Accept": "text/event-stream"}
        text_parts: list[str] = []
        tool_calls: dict[int, dict[str, Any]] = {}

        try:
            with self._client() as client:
                with client.stream(
                    "POST", f"{self.base_url}/chat/completions", json=payload, headers=headers
                ) as resp:
                    if resp.status_code != 200:
                        resp.read()
                        return self._fail(result, f"LLM request failed: HTTP {resp.status_code}")
                    for line in resp.iter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        self._consume_chunk(data, text_parts, tool_calls, on_text)
        except httpx.HTTPError as e:
            result.text = "".join(text_parts)
            return self._fail(result, f"LLM request failed: {e!s}")

        result.text = "".join(text_parts)
        result.tool_calls = [self._finish_tool_call(tool_calls[i]) for i in sorted(tool_calls)]
        result.success = True
        return result

    def narrate(
        self,
        analysis: DealAnalysis,
        history: list[dict[str, str]] | None = None,
        on_text: Callable[[str], None] | None = None,
    ) -> NarrativeResult:
        """Narrate an engine analysis, optionally continuing a conversation."""
        messages = list(history or [])
        messages.append({"role": "user", "content": build_narrative_prompt(analysis)})
        return self.chat(messages, on_text=on_text)

    def _consume_chunk(
        self,
        data: str,
        text_parts: list[str],
        tool_calls: dict[int, dict[str, Any]],
        on_text: Callable[[str], None] | None,
    ) -> None:
        try:
            chunk = json.loads(data)
        except ValueError:
            return
        if not isinstance(chunk, dict):
            return
        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return
        delta = choices[0].get("delta")
        if not isinstance(delta, dict):
            return
        content = delta.get("content")
        if isinstance(content, str) and content:
            text_parts.append(content)
            if on_text:
                on_text(content)
        calls = delta.get("tool_calls")
        if not isinstance(calls, list):
            return
        for call in calls:
            if not isinstance(call, dict):
                continue
            idx = call.get("index")
            if not isinstance(idx, int) or isinstance(idx, bool):
                idx = 0
            entry = tool_calls.setdefault(idx, {"id": "", "name": "", "arguments": ""})
            if isinstance(call.get("id"), str) and call["id"]:
                entry["id"] = call["id"]
            fn = call.get("function")
            if not isinstance(fn, dict):
                continue
            if isinstance(fn.get("name"), str) and fn["name"]:
                entry["name"] = fn["name"]
            args = fn.get("arguments")
            if isinstance(args, str):
                entry["arguments"] += args
            elif args is not None:
                entry["arguments"] += json.dumps(args)

    def _finish_tool_call(self, entry: dict[str, Any]) -> dict[str, Any]:
        """Decode accumulated JSON arguments; keep the raw string if invalid."""
        args: Any = entry["arguments"]
        try:
            args = json.loads(args) if args else {}
        except ValueError:
            pass
        return {"id": entry["id"], "name": entry["name"], "arguments": args}
