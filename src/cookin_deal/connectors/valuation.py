"""Property valuation lookup (RentCast AVM).

Uses GET /avm/value?address=...&compCount=N with the X-Api-Key header.
The estimate is advisory: it can prefill ARV but never enters the engine
on its own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..models import DealInput
from .base import ConnectorResult, HTTPConnector


@dataclass
class Comparable:
    """A comparable sale/listing returned with the estimate."""

    address: str
    price: float
    sqft: float | None = None
    bedrooms: float | None = None
    bathrooms: float | None = None
    distance_miles: float | None = None
    correlation: float | None = None


@dataclass
class ValuationResult(ConnectorResult):
    """Estimated value and comparables for an address."""

    address: str = ""
    estimated_value: float = 0.0
    value_low: float | None = None
    value_high: float | None = None
    comparables: list[Comparable] = field(default_factory=list)
    raw_payload: dict[str, Any] = field(default_factory=dict)


def _num(val: Any) -> float | None:
    if val is None:
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


class PropertyValuationConnector(HTTPConnector):
    """Connector for the RentCast value estimate endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.rentcast.io/v1",
        comp_count: int = 5,
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, transport=transport)
        self.api_key = api_key or os.environ.get("RENTCAST_API_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.comp_count = comp_count

    @property
    def source_name(self) -> str:
        return "rentcast_avm"

    def lookup(
        self,
        address: str,
        city: str,
        state: str,
        zip_code: str = "",
        property_type: str = "",
        bedrooms: float | None = None,
        bathrooms: float | None = None,
        sqft: float | None = None,
    ) -> ValuationResult:
        """Estimate value for an address. Never raises; check ``result.success``."""
        full_address = f"{address}, {city}, {state}" + (f", {zip_code}" if zip_code else "")
        result = ValuationResult(source=self.source_name, address=full_address)
        if not (address and city and state):
            return self._fail(result, "Address, city, and state are required")
        if not self.api_key:
            return self._fail(result, "RENTCAST_API_KEY not set. Set env var or pass api_key.")

        params: dict[str, Any] = {"address": full_address, "compCount": self.comp_count}
        if property_type:
            params["propertyType"] = property_type
        if bedrooms:
            params["bedrooms"] = bedrooms
        if bathrooms:
            params["bathrooms"] = bathrooms
        if sqft:
            params["squareFootage"] = sqft

        headers = {"X-Api-Key": self.api_key, "Accept": "application/json"}
        try:
            with self._client() as client:
                resp = client.get(f"{self.base_url}/avm/value", params=params, headers=headers)
        except httpx.HTTPError as e:
            return self._fail(result, f"Property lookup failed: {e!s}")

        if resp.status_code != 200:
            return self._fail(result, f"Property lookup failed: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            return self._fail(result, "Property lookup failed: invalid JSON response")
        if not isinstance(data, dict):
            return self._fail(result, "Property lookup failed: unexpected response shape")

        result.raw_payload = data
        result.estimated_value = _num(data.get("price")) or 0.0
        result.value_low = _num(data.get("priceRangeLow"))
        result.value_high = _num(data.get("priceRangeHigh"))
        result.comparables = [
            self._item_to_comparable(c) for c in data.get("comparables") or [] if isinstance(c, dict)
        ]
        result.success = True
        return result

    def lookup_deal(self, deal: DealInput) -> ValuationResult:
        """Lookup using a deal's property section."""
        p = deal.property_info
        return self.lookup(
            address=p.address,
            city=p.city,
            state=p.state,
            zip_code=p.zip,
            property_type=p.property_type,
            bedrooms=p.bedrooms,
            bathrooms=p.bathrooms,
            sqft=p.sqft,
        )

    def _item_to_comparable(self, item: dict[str, Any]) -> Comparable:
        return Comparable(
            address=str(item.get("formattedAddress") or item.get("addressLine1") or ""),
            price=_num(item.get("price")) or 0.0,
            sqft=_num(item.get("squareFootage")),
            bedrooms=_num(item.get("bedrooms")),
            bathrooms=_num(item.get("bathrooms")),
            distance_miles=_num(item.get("distance")),
            correlation=_num(item.get("correlation")),
        )
