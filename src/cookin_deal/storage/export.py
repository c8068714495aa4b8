"""Export deal analyses: plain-text worksheet, CSV and JSON."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models import DealAnalysis, RehabCategories
from ..underwriting import monthly_roi, within_seventy_percent_rule

_RULE = "=" * 80
_THIN_RULE = "-" * 80
_SUBTOTAL_RULE = "  " + "─" * 49
_LABEL_WIDTH = 24


def _serialize(obj: Any) -> Any:
    """JSON serializer for datetime and other objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _money(value: float) -> str:
    """``$1,234`` for whole amounts, ``$1,234.50`` otherwise; sign in front."""
    sign = "-" if value < 0 else ""
    value = round(abs(value), 2)
    if float(value).is_integer():
        return f"{sign}${value:,.0f}"
    return f"{sign}${value:,.2f}"


def _number(value: float) -> str:
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def _line(label: str, value: str, indent: int = 2) -> str:
    return f"{' ' * indent}{(label + ':').ljust(_LABEL_WIDTH)}{value}"


def _heading(title: str) -> list[str]:
    return [_THIN_RULE, title.center(80).rstrip(), _THIN_RULE, ""]


def render_worksheet(
    analysis: DealAnalysis,
    generated_at: datetime | None = None,
    analysis_id: str | None = None,
) -> str:
    """Render the plain-text deal worksheet.

    Every number comes from ``analysis.calculations``; nothing is recomputed
    here except display-only ratios of already computed values.
    """
    deal = analysis.deal
    calc = analysis.calculations
    p = deal.property_info
    fin = deal.financing
    hold = deal.holding
    buy = deal.buying
    sell = deal.selling
    generated_at = generated_at or datetime.now()
    analysis_id = analysis_id or format(int(generated_at.timestamp() * 1000), "X")

    lines: list[str] = [
        _RULE,
        "COOKINCAP DEAL ANALYZER WORKSHEET".center(80).rstrip(),
        _RULE,
        "",
        f"Generated: {generated_at.strftime('%A, %B %d, %Y %I:%M %p')}",
        f"Analysis ID: {analysis_id}",
        "",
    ]

    lines += _heading("PROPERTY DETAILS")
    city_line = f"{p.city}, {p.state} {p.zip}".strip()
    lines += [
        _line("Address", p.address or "Not provided", 0),
        _line("City/State/Zip", city_line, 0),
        _line("Property Type", p.property_type, 0),
        _line("Bedrooms/Baths", f"{p.bedrooms} bed / {_number(p.bathrooms)} bath", 0),
        _line("Square Footage", f"{_number(p.sqft)} sqft", 0),
        _line("Year Built", str(p.year_built), 0),
        _line("Lot Size", _number(p.lot_size), 0),
        "",
    ]

    lines += _heading("DEAL ECONOMICS")
    lines += [
        "ACQUISITION",
        _line("Asking Price", _money(deal.pricing.asking_price)),
        _line("Purchase Price", _money(deal.pricing.purchase_price)),
        _line("After Repair Value", _money(deal.pricing.arv)),
        "",
        "REHAB BUDGET BREAKDOWN",
    ]
    for name, amount in deal.rehab.items():
        lines.append(_line(RehabCategories.LABELS[name], _money(amount)))
    for item in deal.custom_rehab_items:
        lines.append(_line(item.name or "Custom Item", _money(item.cost)))
    lines += [
        _SUBTOTAL_RULE,
        _line("TOTAL REHAB", _money(calc.total_rehab_cost)),
        "",
        "FINANCING",
        _line("Financing Type", fin.financing_type.value),
        _line("Loan Amount", _money(fin.loan_amount)),
        _line("Interest Rate", f"{_number(fin.interest_rate)}%"),
        _line("Loan Term", f"{fin.loan_term_months} months"),
        _line("Points", f"{_number(fin.loan_points)}%"),
        _line("Points Cost", _money(calc.points_cost)),
        _line("Total Interest", _money(calc.total_interest)),
        _line("Monthly Payment", _money(round(analysis.monthly_payment, 2))),
        "",
        f"HOLDING COSTS ({hold.holding_period_months} months)",
        _line("Monthly Taxes", _money(hold.monthly_taxes)),
        _line("Monthly Insurance", _money(hold.monthly_insurance)),
        _line("Monthly Utilities", _money(hold.monthly_utilities)),
        _line("Monthly HOA", _money(hold.monthly_hoa)),
        _line("Lawn Care", _money(hold.lawn_care)),
        _line("Security", _money(hold.security)),
        _line("Property Management", _money(hold.property_management)),
        _SUBTOTAL_RULE,
        _line("TOTAL HOLDING", _money(calc.total_holding_costs)),
        "",
        "BUYING COSTS",
        _line("Closing Costs", _money(buy.closing_costs)),
        _line("Inspection", _money(buy.inspection)),
        _line("Appraisal", _money(buy.appraisal)),
        _line("Title Insurance", _money(buy.title_insurance)),
        _line("Survey Fee", _money(buy.survey_fee)),
        _line("Attorney Fees", _money(buy.attorney_fees)),
        _line("Recording Fees", _money(buy.recording_fees)),
        _line("Escrow Fees", _money(buy.escrow_fees)),
        _line("Other", _money(buy.other)),
        _SUBTOTAL_RULE,
        _line("TOTAL BUYING", _money(calc.total_buying_costs)),
        "",
        "SELLING COSTS",
        _line("Agent Commission", f"{_number(sell.agent_commission_percent)}% ({_money(calc.agent_commission)})"),
        _line("Closing Costs", _money(sell.closing_costs)),
        _line("Title Insurance", _money(sell.title_insurance)),
        _line("Transfer Taxes", _money(sell.transfer_taxes)),
        _line("Home Warranty", _money(sell.home_warranty)),
        _line("Concessions", _money(sell.concessions)),
        _line("Staging", _money(sell.staging_cost)),
        _line("Photography/Marketing", _money(sell.photography_marketing)),
        _line("Other", _money(sell.other)),
        _SUBTOTAL_RULE,
        _line("TOTAL SELLING", _money(calc.total_selling_costs)),
        "",
    ]

    lines += _heading("DEAL ANALYSIS")
    rehab_per_sqft = calc.total_rehab_cost / p.sqft if p.sqft > 0 else 0
    lines += [
        _line("SIGNAL", analysis.signal.value, 0),
        _line("GRADE", analysis.grade.value, 0),
        _line("RETURN ON INVESTMENT", f"{calc.roi:.2f}%", 0),
        _line("PROJECTED PROFIT", _money(calc.total_profit), 0),
        "",
        "KEY METRICS",
        _line("% of ARV", f"{calc.percent_of_arv:.1f}%"),
        _line("Max Allowable Offer", _money(calc.max_allowable_offer)),
        _line("Equity at Purchase", _money(calc.equity_at_purchase)),
        _line("Cash Required", _money(calc.cash_needed)),
        _line("Total Investment", _money(calc.total_investment)),
        _line("ARV per Sq Ft", f"${calc.arv_per_sqft:,.2f}"),
        _line("Cost per Sq Ft", f"${calc.cost_per_sqft:,.2f}"),
        _line("Rehab per Sq Ft", f"${rehab_per_sqft:,.2f}"),
        _line("Profit per Sq Ft", f"${calc.profit_per_sqft:,.2f}"),
        _line("Monthly ROI", f"{monthly_roi(calc.roi, hold.holding_period_months):.2f}%"),
        "",
    ]

    lines += _heading("70% RULE CHECK")
    within = within_seventy_percent_rule(deal, calc)
    lines += [
        _line("ARV", _money(deal.pricing.arv), 0),
        _line("70% of ARV", _money(deal.pricing.arv * 0.7), 0),
        _line("Less Rehab", _money(calc.total_rehab_cost), 0),
        _line("MAX OFFER (70% Rule)", _money(calc.max_allowable_offer), 0),
        _line("Your Purchase Price", _money(deal.pricing.purchase_price), 0),
        "WITHIN 70% RULE" if within else "EXCEEDS 70% RULE",
        "",
        _RULE,
        "CONFIDENTIAL - FOR INTERNAL USE ONLY".center(80).rstrip(),
        _RULE,
    ]
    return "\n".join(lines) + "\n"


def write_worksheet(analysis: DealAnalysis, path: Path | str) -> Path:
    """Write the plain-text worksheet to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_worksheet(analysis), encoding="utf-8")
    return path


def export_csv(analyses: list[DealAnalysis], path: Path | str) -> None:
    """Export a one-row-per-deal summary to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "rank",
        "address",
        "purchase_price",
        "arv",
        "total_rehab_cost",
        "total_investment",
        "total_profit",
        "roi",
        "percent_of_arv",
        "max_allowable_offer",
        "cash_needed",
        "signal",
        "grade",
    ]

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for i, a in enumerate(analyses, 1):
            c = a.calculations
            writer.writerow({
                "rank": i,
                "address": a.deal.property_info.full_address,
                "purchase_price": a.deal.pricing.purchase_price,
                "arv": a.deal.pricing.arv,
                "total_rehab_cost": c.total_rehab_cost,
                "total_investment": c.total_investment,
                "total_profit": c.total_profit,
                "roi": round(c.roi, 4),
                "percent_of_arv": round(c.percent_of_arv, 4),
                "max_allowable_offer": c.max_allowable_offer,
                "cash_needed": c.cash_needed,
                "signal": a.signal.value,
                "grade": a.grade.value,
            })


def export_json(analyses: list[DealAnalysis], path: Path | str) -> None:
    """Export full analyses (inputs, calculations, classifications) to JSON.

    This is a report, not a save format: reload deals from their ``deal``
    entries and re-evaluate.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "run_at": datetime.utcnow().isoformat(),
        "count": len(analyses),
        "results": [a.to_dict() for a in analyses],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=_serialize)
