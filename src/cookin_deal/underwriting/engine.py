"""Valuation engine for fix-and-flip deal analysis.

Every display and export path goes through :func:`evaluate` (or
:func:`analyze`); nothing else recomputes these formulas.
"""

from __future__ import annotations

from typing import Iterable, List

from ..models import Calculations, DealAnalysis, DealInput
from .signals import classify_grade, classify_signal

# 70% rule: max offer = ARV * 0.70 - rehab
MAO_ARV_FACTOR = 0.70


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0 when denominator <= 0."""
    if denominator > 0:
        return numerator / denominator * scale
    return 0


def total_rehab_cost(deal: DealInput) -> float:
    """Sum of all rehab buckets plus custom line items."""
    buckets = sum(amount for _, amount in deal.rehab.items())
    custom = sum(item.cost for item in deal.custom_rehab_items)
    return buckets + custom


def _monthly_holding(deal: DealInput) -> float:
    h = deal.holding
    return (
        h.monthly_taxes
        + h.monthly_insurance
        + h.monthly_utilities
        + h.monthly_hoa
        + h.lawn_care
        + h.security
        + h.property_management
    )


def _total_buying(deal: DealInput) -> float:
    b = deal.buying
    return (
        b.closing_costs
        + b.inspection
        + b.appraisal
        + b.title_insurance
        + b.survey_fee
        + b.attorney_fees
        + b.recording_fees
        + b.escrow_fees
        + b.other
    )


def _total_selling(deal: DealInput, agent_commission: float) -> float:
    s = deal.selling
    return (
        agent_commission
        + s.closing_costs
        + s.title_insurance
        + s.transfer_taxes
        + s.home_warranty
        + s.concessions
        + s.staging_cost
        + s.photography_marketing
        + s.other
    )


def evaluate(deal: DealInput) -> Calculations:
    """Compute all derived deal metrics.

    Pure and total: no I/O, no exceptions for well-typed input, and every
    division is guarded so zero ARV, zero investment or zero square footage
    yield 0 for the affected ratio. Negative results (profit, MAO, equity,
    cash needed) are returned as-is.

    Interest is the interest-only aggregate
    ``loan_amount * rate/100/12 * term_months`` regardless of how the
    payment is displayed.
    """
    price = deal.pricing.purchase_price
    arv = deal.pricing.arv
    fin = deal.financing
    sqft = deal.property_info.sqft

    rehab = total_rehab_cost(deal)

    # Financing
    points_cost = fin.loan_amount * fin.loan_points / 100
    monthly_rate = fin.interest_rate / 100 / 12
    total_interest = fin.loan_amount * monthly_rate * fin.loan_term_months

    # Holding
    monthly_holding = _monthly_holding(deal)
    total_holding = monthly_holding * deal.holding.holding_period_months

    # Transaction costs
    total_buying = _total_buying(deal)
    agent_commission = arv * deal.selling.agent_commission_percent / 100
    total_selling = _total_selling(deal, agent_commission)

    total_investment = price + rehab + total_buying + total_holding + points_cost + total_interest
    total_profit = arv - total_investment - total_selling

    return Calculations(
        total_rehab_cost=rehab,
        points_cost=points_cost,
        total_interest=total_interest,
        monthly_holding=monthly_holding,
        total_holding_costs=total_holding,
        total_buying_costs=total_buying,
        agent_commission=agent_commission,
        total_selling_costs=total_selling,
        total_investment=total_investment,
        total_profit=total_profit,
        roi=_ratio(total_profit, total_investment, 100),
        percent_of_arv=_ratio(price, arv, 100),
        max_allowable_offer=arv * MAO_ARV_FACTOR - rehab,
        equity_at_purchase=arv - price - rehab,
        cash_needed=price + rehab + total_buying - fin.loan_amount,
        arv_per_sqft=_ratio(arv, sqft),
        cost_per_sqft=_ratio(price + rehab, sqft),
        profit_per_sqft=_ratio(total_profit, sqft),
    )


def evaluate_many(deals: Iterable[DealInput]) -> List[Calculations]:
    """Evaluate multiple deals."""
    return [evaluate(d) for d in deals]


def analyze(deal: DealInput, amortizing: bool = False) -> DealAnalysis:
    """Evaluate a deal and attach its signal, grade and display payment."""
    calc = evaluate(deal)
    fin = deal.financing
    return DealAnalysis(
        deal=deal,
        calculations=calc,
        signal=classify_signal(calc.roi),
        grade=classify_grade(calc.roi),
        monthly_payment=monthly_payment(
            fin.loan_amount, fin.interest_rate, fin.loan_term_months, amortizing=amortizing
        ),
    )


def monthly_payment(
    loan_amount: float,
    interest_rate: float,
    term_months: int,
    amortizing: bool = False,
) -> float:
    """Monthly loan payment for display.

    Interest-only: ``loan_amount * rate/100/12``. Amortizing: standard annuity
    payment over ``term_months``. This figure never feeds :func:`evaluate`.
    """
    r = interest_rate / 100 / 12
    if not amortizing:
        return loan_amount * r
    n = int(term_months)
    if n <= 0:
        return 0.0
    if r == 0:
        return loan_amount / n
    return loan_amount * (r * (1 + r) ** n) / ((1 + r) ** n - 1)


def monthly_roi(roi: float, holding_period_months: int) -> float:
    """ROI spread over the holding period."""
    return _ratio(roi, holding_period_months)


def ltv(deal: DealInput) -> float:
    """Loan-to-value as a percent of purchase price."""
    return _ratio(deal.financing.loan_amount, deal.pricing.purchase_price, 100)


def within_seventy_percent_rule(deal: DealInput, calc: Calculations) -> bool:
    """True when the purchase price does not exceed the 70%-rule MAO."""
    return deal.pricing.purchase_price <= calc.max_allowable_offer
