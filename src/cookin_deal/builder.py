"""Build fully-populated DealInput records from raw form values.

Form fields arrive as free text (currency) or decimal strings (percentages)
and may be partial. Everything here normalizes them so the valuation engine
only ever sees complete, numeric input.
"""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

from .models import (
    BuyingCosts,
    CustomRehabItem,
    DealInput,
    DrawSchedule,
    Financing,
    FinancingType,
    HoldingCosts,
    Pricing,
    PropertyInfo,
    SellingCosts,
)

_TEXT_KEYS = {"address", "city", "state", "zip", "propertyType"}
_DECIMAL_KEYS = {"bathrooms", "lotSize", "interestRate", "loanPoints", "agentCommissionPercent"}
_BOOL_KEYS = {"rehabFinanced"}
_ENUM_KEYS: dict[str, type[Enum]] = {
    "financingType": FinancingType,
    "drawSchedule": DrawSchedule,
}
# Every other flat key is a whole-number amount (dollars, counts, months)
_FLAT_KEYS = {
    key
    for section in (PropertyInfo, Pricing, Financing, HoldingCosts, BuyingCosts, SellingCosts)
    for key in section.KEYS.values()
}

_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}


def parse_currency(value: Any) -> int:
    """Parse a free-text currency field to whole dollars.

    Strips every non-digit character (``"$1,250"`` -> 1250, and like the form,
    ``"1,250.75"`` -> 125075). Empty or unparsable input yields 0.
    Amounts too large to represent as a float also yield 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return _representable(int(value))
    digits = re.sub(r"[^0-9]", "", str(value))
    if not digits:
        return 0
    try:
        return _representable(int(digits))
    except ValueError:
        # past the interpreter's int string conversion limit
        return 0


def _representable(amount: int) -> int:
    """``amount``, or 0 when it is too large to convert to a float."""
    try:
        float(amount)
    except OverflowError:
        return 0
    return amount


def parse_decimal(value: Any) -> float:
    """Parse a decimal field (``"12.5"``, ``"6%"``, ``"1,500.5"``). Falls back to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    s = re.sub(r"[%,\s$]", "", str(value))
    try:
        parsed = float(s) if s else 0.0
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_percent(value: Any) -> float:
    """Parse a percentage field as a decimal percent (``"12"`` -> 12.0)."""
    return parse_decimal(value)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value or "").strip().lower() in _TRUE_STRINGS


def _parse_enum(enum_cls: type[Enum], value: Any, default: Any) -> Any:
    """Enum member for ``value``; unknown values keep ``default``."""
    try:
        return enum_cls(value).value
    except ValueError:
        return default


def _normalize_flat(key: str, value: Any, current: Any) -> Any:
    if key in _TEXT_KEYS:
        return "" if value is None else str(value).strip()
    if key in _DECIMAL_KEYS:
        return parse_decimal(value)
    if key in _BOOL_KEYS:
        return _parse_bool(value)
    if key in _ENUM_KEYS:
        return _parse_enum(_ENUM_KEYS[key], value, current)
    return parse_currency(value)


def _new_item_id() -> str:
    return uuid.uuid4().hex[:12]


def _normalize_custom_items(items: Any) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    if not isinstance(items, (list, tuple)):
        return out
    for item in items:
        if isinstance(item, CustomRehabItem):
            item = item.to_dict()
        if not isinstance(item, Mapping):
            continue
        out.append({
            "id": str(item.get("id") or _new_item_id()),
            "name": str(item.get("name") or "").strip(),
            "cost": parse_currency(item.get("cost")),
            "notes": str(item.get("notes") or ""),
        })
    return out


def build_deal_input(
    fields: Mapping[str, Any] | None = None,
    defaults: DealInput | None = None,
) -> DealInput:
    """Merge raw form fields onto ``defaults`` and return a complete DealInput.

    ``fields`` uses the form's camelCase keys and may be partial. Values may be
    strings, numbers or None; unknown keys are ignored. ``rehabCategories`` is
    merged bucket by bucket; ``customRehabItems`` replaces the list.
    """
    base = (defaults or DealInput()).to_dict()
    for key, value in (fields or {}).items():
        if key in _FLAT_KEYS:
            base[key] = _normalize_flat(key, value, base.get(key))
        elif key == "rehabCategories" and isinstance(value, Mapping):
            rehab = dict(base["rehabCategories"])
            for bucket, amount in value.items():
                if bucket in rehab:
                    rehab[bucket] = parse_currency(amount)
            base["rehabCategories"] = rehab
        elif key == "customRehabItems":
            base["customRehabItems"] = _normalize_custom_items(value)
    return DealInput.from_dict(base)


def default_deal(config_defaults: Mapping[str, Any] | None = None) -> DealInput:
    """A new, empty worksheet, optionally seeded from config ``deal_defaults``."""
    return build_deal_input(config_defaults or {})


def apply_updates(deal: DealInput, updates: Mapping[str, Any]) -> DealInput:
    """Return a new DealInput with ``updates`` (form keys) applied."""
    return build_deal_input(updates, defaults=deal)


def validate_deal_input(deal: DealInput) -> list[str]:
    """Report form-level problems. The engine never consults this."""
    problems: list[str] = []
    data = deal.to_dict()
    for key in sorted(_FLAT_KEYS - _TEXT_KEYS - _BOOL_KEYS - set(_ENUM_KEYS)):
        value = data.get(key)
        if isinstance(value, (int, float)) and value < 0:
            problems.append(f"{key} must not be negative ({value})")
    for bucket, amount in data["rehabCategories"].items():
        if amount < 0:
            problems.append(f"rehabCategories.{bucket} must not be negative ({amount})")
    for item in deal.custom_rehab_items:
        if item.cost < 0:
            problems.append(f"customRehabItems[{item.id}] cost must not be negative ({item.cost})")
    if deal.holding.holding_period_months < 1:
        problems.append("holdingPeriodMonths must be at least 1")
    if deal.property_info.sqft <= 0:
        problems.append("sqft must be positive for per-square-foot metrics")
    if deal.pricing.arv and deal.pricing.purchase_price > deal.pricing.arv:
        problems.append("purchasePrice exceeds arv")
    return problems


def add_custom_item(deal: DealInput, name: str, cost: Any = 0, notes: str = "") -> DealInput:
    """Append a custom rehab line item."""
    item = CustomRehabItem(
        id=_new_item_id(),
        name=name.strip(),
        cost=parse_currency(cost),
        notes=notes,
    )
    return replace(deal, custom_rehab_items=deal.custom_rehab_items + (item,))


def remove_custom_item(deal: DealInput, item_id: str) -> DealInput:
    """Drop the custom rehab line item with ``item_id`` (no-op if absent)."""
    kept = tuple(i for i in deal.custom_rehab_items if i.id != item_id)
    return replace(deal, custom_rehab_items=kept)


def loan_from_ltv(deal: DealInput, ltv_percent: float) -> DealInput:
    """Set the loan amount to ``ltv_percent`` of purchase price.

    Leaves the deal unchanged when there is no purchase price yet.
    """
    price = deal.pricing.purchase_price
    if price <= 0:
        return deal
    loan = _round_half_up(price * (ltv_percent / 100))
    return replace(deal, financing=replace(deal.financing, loan_amount=loan))


@dataclass(frozen=True)
class RehabTemplate:
    """Quick rehab budget at a flat cost per square foot."""

    key: str
    label: str
    per_sqft: float


REHAB_TEMPLATES: dict[str, RehabTemplate] = {
    t.key: t
    for t in (
        RehabTemplate("light-cosmetic", "Light Cosmetic", 15),
        RehabTemplate("moderate", "Moderate Rehab", 30),
        RehabTemplate("heavy", "Heavy Rehab", 50),
        RehabTemplate("full-gut", "Full Gut", 80),
    )
}

# Share of the template budget per bucket
_TEMPLATE_SHARES: dict[str, float] = {
    "painting": 0.10,
    "flooring": 0.15,
    "kitchen_cabinets": 0.12,
    "kitchen_countertops": 0.08,
    "kitchen_appliances": 0.08,
    "bathroom_vanities": 0.06,
    "bathroom_tile_shower": 0.08,
    "electrical": 0.05,
    "plumbing": 0.05,
    "contingency": 0.10,
    "miscellaneous": 0.05,
}
# Systems work only for heavy templates (>= $50/sqft)
_HEAVY_SHARES: dict[str, float] = {"hvac": 0.08, "roofing": 0.10}
_HEAVY_MIN_PER_SQFT = 50


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def apply_rehab_template(deal: DealInput, template: RehabTemplate | str) -> DealInput:
    """Spread ``sqft * per_sqft`` across rehab buckets.

    Buckets the template does not touch keep their current values.
    """
    if isinstance(template, str):
        template = REHAB_TEMPLATES[template]
    total = deal.property_info.sqft * template.per_sqft
    heavy = template.per_sqft >= _HEAVY_MIN_PER_SQFT
    updates = {k: _round_half_up(total * share) for k, share in _TEMPLATE_SHARES.items()}
    for k, share in _HEAVY_SHARES.items():
        updates[k] = _round_half_up(total * share) if heavy else 0
    return replace(deal, rehab=replace(deal.rehab, **updates))
