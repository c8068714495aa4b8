"""Tests for the valuation engine."""

from dataclasses import replace

import pytest

from cookin_deal.builder import apply_updates, build_deal_input
from cookin_deal.models import DealInput, Grade, RehabCategories, Signal
from cookin_deal.underwriting import (
    analyze,
    evaluate,
    evaluate_many,
    ltv,
    monthly_payment,
    monthly_roi,
    total_rehab_cost,
    within_seventy_percent_rule,
)


class TestWorkedScenarios:
    """Hand-checked deals."""

    def test_scenario_a_strong_buy(self, scenario_a_deal: DealInput) -> None:
        calc = evaluate(scenario_a_deal)
        assert calc.total_rehab_cost == 35000
        assert calc.total_investment == 220000
        assert calc.total_profit == 55000
        assert calc.roi == pytest.approx(25.0)

        result = analyze(scenario_a_deal)
        assert result.signal == Signal.STRONG_BUY
        assert result.grade == Grade.A

    def test_scenario_a_seventy_percent_rule(self, scenario_a_deal: DealInput) -> None:
        calc = evaluate(scenario_a_deal)
        assert calc.max_allowable_offer == pytest.approx(275000 * 0.7 - 35000)
        assert calc.percent_of_arv == pytest.approx(185000 / 275000 * 100)
        assert calc.equity_at_purchase == 55000
        assert within_seventy_percent_rule(scenario_a_deal, calc) is False

    def test_scenario_b_zero_arv(self, bare_deal: DealInput) -> None:
        deal = apply_updates(bare_deal, {
            "purchasePrice": 100000,
            "arv": 0,
            "rehabCategories": {"drywall": 5000},
        })
        calc = evaluate(deal)
        assert calc.percent_of_arv == 0
        assert calc.arv_per_sqft == 0
        assert calc.max_allowable_offer == -5000
        assert calc.total_investment == 105000
        assert calc.total_profit == -105000
        assert calc.roi == pytest.approx(-100.0)
        assert analyze(deal).signal == Signal.PASS
        assert analyze(deal).grade == Grade.F

    def test_scenario_c_financing_costs(self, bare_deal: DealInput) -> None:
        deal = apply_updates(bare_deal, {
            "loanAmount": 100000,
            "loanPoints": 2,
            "interestRate": 12,
            "loanTermMonths": 12,
        })
        calc = evaluate(deal)
        assert calc.points_cost == pytest.approx(2000)
        assert calc.total_interest == pytest.approx(12000)

    def test_scenario_d_agent_commission(self, bare_deal: DealInput) -> None:
        deal = apply_updates(bare_deal, {
            "arv": 300000,
            "agentCommissionPercent": 6,
            "closingCostsSelling": 1500,
        })
        calc = evaluate(deal)
        assert calc.agent_commission == pytest.approx(18000)
        assert calc.total_selling_costs == pytest.approx(19500)

    def test_sample_deal(self, sample_deal: DealInput) -> None:
        calc = evaluate(sample_deal)
        assert calc.total_rehab_cost == 33000
        assert calc.points_cost == pytest.approx(3040)
        assert calc.total_interest == pytest.approx(18240)
        assert calc.monthly_holding == 650
        assert calc.total_holding_costs == 3900
        assert calc.total_buying_costs == 4000
        assert calc.total_investment == pytest.approx(252180)
        assert calc.total_selling_costs == pytest.approx(20500)
        assert calc.total_profit == pytest.approx(27320)
        assert calc.cash_needed == 190000 + 33000 + 4000 - 152000
        assert calc.cost_per_sqft == pytest.approx((190000 + 33000) / 1600)
        result = analyze(sample_deal)
        assert result.signal == Signal.CONSIDER
        assert result.grade == Grade.B_MINUS


class TestEngineProperties:
    """Invariants that hold for any input."""

    def test_deterministic(self, sample_deal: DealInput) -> None:
        assert evaluate(sample_deal) == evaluate(sample_deal)

    def test_does_not_mutate_input(self, sample_deal: DealInput) -> None:
        before = sample_deal.to_dict()
        evaluate(sample_deal)
        assert sample_deal.to_dict() == before

    def test_all_zero_input(self, zero_costs: dict) -> None:
        deal = build_deal_input({**zero_costs, "sqft": 0})
        calc = evaluate(deal)
        assert calc.roi == 0
        assert calc.percent_of_arv == 0
        assert calc.arv_per_sqft == 0
        assert calc.cost_per_sqft == 0
        assert calc.profit_per_sqft == 0
        assert analyze(deal).signal == Signal.RENEGOTIATE

    def test_zero_sqft_only_zeroes_per_sqft(self, sample_deal: DealInput) -> None:
        deal = apply_updates(sample_deal, {"sqft": 0})
        calc = evaluate(deal)
        assert calc.arv_per_sqft == 0
        assert calc.profit_per_sqft == 0
        assert calc.roi == evaluate(sample_deal).roi

    def test_rehab_additivity(self, sample_deal: DealInput) -> None:
        base = evaluate(sample_deal)
        bumped = replace(sample_deal, rehab=replace(sample_deal.rehab, plumbing=sample_deal.rehab.plumbing + 1234))
        calc = evaluate(bumped)
        assert calc.total_rehab_cost == base.total_rehab_cost + 1234
        assert calc.total_investment == pytest.approx(base.total_investment + 1234)
        assert calc.total_selling_costs == base.total_selling_costs
        assert calc.total_holding_costs == base.total_holding_costs

    def test_every_bucket_counts(self, bare_deal: DealInput) -> None:
        buckets = {key: 1 for key in RehabCategories.KEYS.values()}
        deal = apply_updates(bare_deal, {"rehabCategories": buckets})
        assert total_rehab_cost(deal) == len(RehabCategories.KEYS)

    def test_custom_items_included(self, bare_deal: DealInput) -> None:
        deal = apply_updates(bare_deal, {
            "customRehabItems": [{"name": "Pool", "cost": 4000}, {"name": "Shed", "cost": 1000}],
        })
        assert evaluate(deal).total_rehab_cost == 5000

    def test_signal_monotonic_in_arv(self, sample_deal: DealInput) -> None:
        ranks = []
        for arv in range(150000, 450001, 10000):
            deal = apply_updates(sample_deal, {"arv": arv, "agentCommissionPercent": 0})
            ranks.append(analyze(deal).signal.rank)
        assert ranks == sorted(ranks)
        assert ranks[0] == Signal.PASS.rank
        assert ranks[-1] == Signal.STRONG_BUY.rank

    def test_draw_schedule_and_rehab_financing_ignored(self, sample_deal: DealInput) -> None:
        deal = apply_updates(sample_deal, {
            "drawSchedule": "upfront",
            "rehabFinanced": True,
            "rehabLoanAmount": 30000,
        })
        assert evaluate(deal) == evaluate(sample_deal)

    def test_huge_currency_input_evaluates(self, bare_deal: DealInput) -> None:
        huge = "9" * 400
        deal = apply_updates(bare_deal, {
            "loanAmount": huge,
            "arv": huge,
            "purchasePrice": huge,
            "rehabCategories": {"roofing": huge},
            "customRehabItems": [{"name": "Pool", "cost": huge}],
        })
        assert deal.financing.loan_amount == 0
        assert deal.pricing.arv == 0
        calc = evaluate(deal)
        assert calc.total_rehab_cost == 0
        assert calc.points_cost == 0

    def test_negative_results_not_clamped(self, bare_deal: DealInput) -> None:
        deal = apply_updates(bare_deal, {"purchasePrice": 200000, "arv": 150000, "loanAmount": 250000})
        calc = evaluate(deal)
        assert calc.total_profit < 0
        assert calc.equity_at_purchase == -50000
        assert calc.cash_needed == -50000

    def test_evaluate_many(self, sample_deal: DealInput, scenario_a_deal: DealInput) -> None:
        results = evaluate_many([sample_deal, scenario_a_deal])
        assert results == [evaluate(sample_deal), evaluate(scenario_a_deal)]


class TestFinancingHelpers:
    """Tests for display-only financing figures."""

    def test_interest_only_payment(self) -> None:
        assert monthly_payment(100000, 12, 12) == pytest.approx(1000)

    def test_amortizing_payment(self) -> None:
        assert monthly_payment(100000, 12, 12, amortizing=True) == pytest.approx(8884.88, abs=0.01)

    def test_amortizing_zero_rate(self) -> None:
        assert monthly_payment(12000, 0, 12, amortizing=True) == pytest.approx(1000)

    def test_amortizing_zero_term(self) -> None:
        assert monthly_payment(100000, 12, 0, amortizing=True) == 0

    def test_amortizing_does_not_change_totals(self, sample_deal: DealInput) -> None:
        interest_only = analyze(sample_deal)
        amortizing = analyze(sample_deal, amortizing=True)
        assert amortizing.calculations == interest_only.calculations
        assert amortizing.monthly_payment > interest_only.monthly_payment

    def test_ltv(self, sample_deal: DealInput) -> None:
        assert ltv(sample_deal) == pytest.approx(80.0)

    def test_ltv_zero_price(self, bare_deal: DealInput) -> None:
        assert ltv(apply_updates(bare_deal, {"loanAmount": 50000})) == 0

    def test_monthly_roi(self) -> None:
        assert monthly_roi(24, 6) == 4
        assert monthly_roi(24, 0) == 0
