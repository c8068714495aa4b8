"""Pytest fixtures."""

import pytest

from cookin_deal.builder import build_deal_input
from cookin_deal.models import DealInput

# Form fields that zero out every non-rehab cost the defaults seed
ZERO_COSTS = {
    "monthlyUtilities": 0,
    "inspectionCosts": 0,
    "appraisalCosts": 0,
    "agentCommissionPercent": 0,
    "loanAmount": 0,
    "loanPoints": 0,
    "holdingPeriodMonths": 6,
}


@pytest.fixture
def zero_costs() -> dict:
    """Copy of the zero-cost form fields."""
    return dict(ZERO_COSTS)


@pytest.fixture
def bare_deal() -> DealInput:
    """Deal with no costs at all beyond what a test sets."""
    return build_deal_input(ZERO_COSTS)


@pytest.fixture
def scenario_a_deal() -> DealInput:
    """$185k purchase, $275k ARV, $35k rehab, nothing else."""
    return build_deal_input({
        **ZERO_COSTS,
        "purchasePrice": 185000,
        "arv": 275000,
        "rehabCategories": {"kitchenCabinets": 20000, "painting": 15000},
    })


@pytest.fixture
def sample_deal() -> DealInput:
    """Realistic hard-money flip with every section filled in."""
    return build_deal_input({
        "address": "123 Main St",
        "city": "Austin",
        "state": "TX",
        "zip": "78701",
        "propertyType": "single-family",
        "sqft": 1600,
        "askingPrice": "$205,000",
        "purchasePrice": "$190,000",
        "arv": "$300,000",
        "rehabCategories": {
            "flooring": 8000,
            "painting": 5000,
            "kitchenCabinets": 9000,
            "roofing": 7000,
        },
        "customRehabItems": [{"id": "pool", "name": "Pool resurface", "cost": 4000}],
        "financingType": "hard-money",
        "loanAmount": 152000,
        "interestRate": "12",
        "loanTermMonths": 12,
        "loanPoints": 2,
        "monthlyTaxes": 300,
        "monthlyInsurance": 150,
        "monthlyUtilities": 200,
        "holdingPeriodMonths": 6,
        "closingCostsBuying": 3000,
        "inspectionCosts": 500,
        "appraisalCosts": 500,
        "agentCommissionPercent": "6%",
        "closingCostsSelling": 2500,
    })
