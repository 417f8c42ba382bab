"""
Tests for the growth projection engine and stage resolution.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from growthsim.errors import ConfigurationError, DomainError, RangeError
from growthsim.params import GrowthStage, default_growth_stages
from growthsim.sim import (
    base_viral_companies,
    projection_frame,
    resolve_stage,
    run_projection,
    summarize_projection,
)

SHORT_PLAN = (
    GrowthStage("credits", 1, 2, aws_credits_active=True, self_hosting_active=False),
    GrowthStage("paid", 3, 3, aws_credits_active=False, self_hosting_active=False, pricing_multiplier=1.5),
)


class TestResolveStage:

    def test_every_default_month_matches_exactly_one_stage(self):
        stages = default_growth_stages()
        for month in range(1, 37):
            resolved = resolve_stage(stages, month)
            assert not resolved.fallback
            assert sum(s.contains(month) for s in stages) == 1
            assert resolved.stage.contains(month)

    def test_month_outside_plan_falls_back_to_first_stage(self):
        resolved = resolve_stage(SHORT_PLAN, 7)
        assert resolved.fallback
        assert resolved.stage is SHORT_PLAN[0]

    def test_empty_stage_list(self):
        with pytest.raises(ConfigurationError):
            resolve_stage([], 1)


def test_base_viral_term_is_monthly_prorated():
    assert base_viral_companies(450, 0.4) == pytest.approx(15)
    assert base_viral_companies(0, 0.4) == 0


@pytest.mark.parametrize("horizon", [1, 2, 12, 36, 40])
def test_cohort_months_are_contiguous(business, infra, stages, horizon):
    projection = run_projection(business, infra, stages, horizon)
    assert projection.time_horizon == horizon
    assert [c.month for c in projection.cohorts] == list(range(1, horizon + 1))


def test_first_two_months(projection):
    m1, m2 = projection.cohorts[:2]

    assert m1.direct_acquisition == pytest.approx(450)
    assert m1.viral_contribution == 0
    assert m1.total_companies == pytest.approx(450)
    assert m1.formation_revenue == pytest.approx(54_000)
    assert m1.monthly_recurring_revenue == pytest.approx(19_800)
    # infra is fully covered by credits in month 1
    assert m1.infrastructure_cost == 0
    assert m1.gross_profit == pytest.approx(73_800 - 450 * 88.61 - 19_800 * 0.03)

    assert m2.viral_contribution == pytest.approx(15)
    assert m2.new_companies == pytest.approx(465)
    assert m2.total_companies == pytest.approx(450 * 0.92 + 465)


def test_direct_acquisition_is_constant(projection):
    assert {c.direct_acquisition for c in projection.cohorts} == {projection.cohorts[0].direct_acquisition}


def test_totals_and_derived_metrics(projection, business):
    cohorts = projection.cohorts
    assert projection.total_revenue == pytest.approx(sum(c.total_revenue for c in cohorts))
    assert projection.total_gross_profit == pytest.approx(sum(c.gross_profit for c in cohorts))
    assert projection.total_infrastructure_cost == pytest.approx(sum(c.infrastructure_cost for c in cohorts))
    assert projection.final_mrr == cohorts[-1].monthly_recurring_revenue
    assert projection.final_arr == pytest.approx(projection.final_mrr * 12)
    assert projection.company_count == cohorts[-1].total_companies
    assert projection.ltv_cac_ratio == pytest.approx(projection.ltv / projection.cac)

    per_founder_mrr = projection.final_mrr / projection.company_count * business.average_companies_per_founder
    assert projection.payback_period == pytest.approx(projection.cac / per_founder_mrr)


def test_stage_change_applies_price_multiplier(business, infra, stages):
    projection = run_projection(business, infra, stages, 13)
    m13 = projection.cohorts[12]
    assert m13.stage_name == "Stage 2: Paid AWS"
    assert m13.monthly_recurring_revenue == pytest.approx(m13.total_companies * 66)


def test_fallback_is_flagged(business, infra):
    projection = run_projection(business, infra, SHORT_PLAN, 5)
    flags = [c.stage_fallback for c in projection.cohorts]
    assert flags == [False, False, False, True, True]
    assert projection.cohorts[4].stage_name == "credits"


def test_fallback_can_be_disabled(business, infra):
    with pytest.raises(ConfigurationError):
        run_projection(business, infra, SHORT_PLAN, 5, allow_stage_fallback=False)


@pytest.mark.parametrize("horizon", [0, -3])
def test_non_positive_horizon(business, infra, stages, horizon):
    with pytest.raises(ConfigurationError):
        run_projection(business, infra, stages, horizon)


def test_gapped_stages_rejected(business, infra):
    gapped = (SHORT_PLAN[0], replace(SHORT_PLAN[1], start_month=4, end_month=6))
    with pytest.raises(ConfigurationError):
        run_projection(business, infra, gapped, 6)


def test_empty_stages_rejected(business, infra):
    with pytest.raises(ConfigurationError):
        run_projection(business, infra, (), 6)


def test_negative_rate_rejected(business, infra, stages):
    with pytest.raises(RangeError):
        run_projection(replace(business, monthly_churn_rate=-0.1), infra, stages, 3)


def test_zero_marketing_spend_is_a_domain_error(business, infra, stages):
    with pytest.raises(DomainError):
        run_projection(replace(business, monthly_marketing_spend=0), infra, stages, 3)


def test_free_product_is_a_domain_error(business, infra, stages):
    free = replace(business, basic_tier_price=0, pro_tier_price=0)
    with pytest.raises(DomainError):
        run_projection(free, infra, stages, 3)


def test_projection_is_idempotent_and_frozen(business, infra, stages):
    a = run_projection(business, infra, stages, 12)
    b = run_projection(business, infra, stages, 12)
    assert a == b
    with pytest.raises(FrozenInstanceError):
        a.cohorts[0].month = 99


def test_projection_frame(projection):
    df = projection_frame(projection)
    assert list(df.index) == list(range(1, 13))
    assert df["cum_revenue"].iloc[-1] == pytest.approx(projection.total_revenue)
    assert df["annual_run_rate"].iloc[-1] == pytest.approx(projection.final_arr)


def test_summary_table(projection, business):
    kpis = summarize_projection(projection, business).set_index("Metric")["Value"]
    assert kpis["gross_margin"] == pytest.approx(projection.total_gross_profit / projection.total_revenue)
    assert kpis["founder_count"] == pytest.approx(projection.company_count / 2.5)


@pytest.mark.parametrize("horizon", [1.9, 12.5])
def test_fractional_horizon_rejected(business, infra, stages, horizon):
    with pytest.raises(ConfigurationError):
        run_projection(business, infra, stages, horizon)


def test_whole_float_horizon_accepted(business, infra, stages):
    assert len(run_projection(business, infra, stages, 3.0).cohorts) == 3
