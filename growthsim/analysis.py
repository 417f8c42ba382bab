# growthsim/analysis.py
import logging
from dataclasses import dataclass, fields, replace
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from growthsim.calculators import CACResult, LTVResult, calculate_cac, calculate_ltv
from growthsim.errors import ConfigurationError, DomainError
from growthsim.params import (
    BusinessParameters,
    GrowthStage,
    IndustryBenchmarks,
    InfrastructureParameters,
    SensitivityRanges,
    default_benchmarks,
    default_business_params,
    default_growth_stages,
    default_infra_params,
)
from growthsim.sim import FinancialProjections, run_projection

logger = logging.getLogger(__name__)

SENSITIVITY_HORIZON = 12
DEFAULT_EXIT_MULTIPLE = 6  # x final ARR


@dataclass(frozen=True)
class SensitivityPoint:
    value: float
    projection: FinancialProjections


@dataclass(frozen=True)
class ExitScenario:
    exit_multiple: float
    exit_valuation: float
    return_value: float
    return_multiple: float


@dataclass(frozen=True)
class BenchmarkComparison:
    metric: str
    ours: float
    industry: float
    multiple: float
    higher_is_better: bool


@dataclass(frozen=True)
class ROIScenario:
    year: int
    revenue: float
    multiple: float
    valuation: float
    equity_value: float
    roi: float


@dataclass(frozen=True)
class ValuationScenario:
    valuation: float
    equity: float
    exit_value: float
    return_value: float
    return_multiple: float


@dataclass(frozen=True)
class StageCostRow:
    month: int
    companies: float
    total_cost: float
    net_cost: float
    credits: float


@dataclass(frozen=True)
class PenetrationPoint:
    month: int
    companies: float
    market_share: float


@dataclass(frozen=True)
class BaseCase:
    business: BusinessParameters
    infra: InfrastructureParameters
    stages: Tuple[GrowthStage, ...]
    cac: CACResult
    ltv: LTVResult
    projection: FinancialProjections
    benchmarks: Tuple[BenchmarkComparison, ...]


# --- Sensitivity ------------------------------------------------------------

_SWEEPABLE = {
    f.name for f in fields(BusinessParameters)
    if f.type in (float, int, "float", "int")
}


def run_sensitivity(business: BusinessParameters, infra: InfrastructureParameters,
                    stages: Sequence[GrowthStage], parameter: str,
                    values: Sequence[float]) -> List[SensitivityPoint]:
    """
    One-factor-at-a-time sweep over ``values`` ([pessimistic, base, optimistic]).

    Only ``parameter`` is overridden; every run is a fresh 12-month projection,
    so interactions between parameters are not modeled.
    """
    if parameter not in _SWEEPABLE:
        raise ConfigurationError(f"{parameter!r} is not a numeric business parameter")
    if len(values) != 3:
        raise ConfigurationError(
            f"sensitivity sweeps take exactly 3 values (pessimistic, base, optimistic), got {len(values)}"
        )

    points = []
    for value in values:
        p2 = replace(business, **{parameter: value})
        logger.debug("Sensitivity run: %s=%s", parameter, value)
        points.append(SensitivityPoint(value, run_projection(p2, infra, stages, SENSITIVITY_HORIZON)))
    return points


def run_sensitivity_suite(business: BusinessParameters, infra: InfrastructureParameters,
                          stages: Sequence[GrowthStage],
                          ranges: SensitivityRanges) -> Dict[str, List[SensitivityPoint]]:
    # marketing efficiency scales the view-to-signup rate rather than naming a field
    efficiency_rates = [business.view_to_signup_rate * m for m in ranges.marketing_efficiency]
    return {
        "formation_conversion_rate": run_sensitivity(
            business, infra, stages, "formation_conversion_rate", ranges.formation_rate),
        "viral_coefficient": run_sensitivity(
            business, infra, stages, "viral_coefficient", ranges.viral_coefficient),
        "monthly_churn_rate": run_sensitivity(
            business, infra, stages, "monthly_churn_rate", ranges.churn_rate),
        "pro_tier_adoption_rate": run_sensitivity(
            business, infra, stages, "pro_tier_adoption_rate", ranges.pro_tier),
        "view_to_signup_rate": run_sensitivity(
            business, infra, stages, "view_to_signup_rate", efficiency_rates),
    }


def sensitivity_frame(points: Sequence[SensitivityPoint]) -> pd.DataFrame:
    return pd.DataFrame({
        "scenario": ["pessimistic", "base", "optimistic"][:len(points)],
        "value": [pt.value for pt in points],
        "total_revenue": [pt.projection.total_revenue for pt in points],
        "company_count": [pt.projection.company_count for pt in points],
        "final_arr": [pt.projection.final_arr for pt in points],
        "ltv_cac_ratio": [pt.projection.ltv_cac_ratio for pt in points],
    })


# --- Investment returns -----------------------------------------------------

def calculate_investment_returns(investment_amount, valuation, projection: FinancialProjections,
                                 exit_multiples: Sequence[float]) -> List[ExitScenario]:
    # Flat equity stake; later dilution is ignored.
    if investment_amount <= 0:
        raise DomainError("investment amount must be positive")
    if valuation <= 0:
        raise DomainError("valuation must be positive")
    equity_fraction = investment_amount / valuation

    scenarios = []
    for multiple in exit_multiples:
        exit_valuation = projection.final_arr * multiple
        return_value = exit_valuation * equity_fraction
        scenarios.append(ExitScenario(
            exit_multiple=multiple,
            exit_valuation=exit_valuation,
            return_value=return_value,
            return_multiple=return_value / investment_amount,
        ))
    return scenarios


def calculate_roi_scenarios(investment_amount, revenues: Sequence[float], multiples: Sequence[float],
                            equity_fraction) -> List[ROIScenario]:
    """Year-by-year exit ROI; years past the end of ``multiples`` reuse its last entry."""
    if investment_amount <= 0:
        raise DomainError("investment amount must be positive")
    if not multiples:
        raise ConfigurationError("at least one exit multiple is required")

    out = []
    for i, revenue in enumerate(revenues):
        multiple = multiples[i] if i < len(multiples) else multiples[-1]
        valuation = revenue * multiple
        equity_value = valuation * equity_fraction
        out.append(ROIScenario(
            year=i + 1,
            revenue=revenue,
            multiple=multiple,
            valuation=valuation,
            equity_value=equity_value,
            roi=equity_value / investment_amount,
        ))
    return out


def investment_scenarios(projection: FinancialProjections, investment_amount, valuations: Sequence[float],
                         exit_multiple=DEFAULT_EXIT_MULTIPLE) -> List[ValuationScenario]:
    """Same exit (final ARR x ``exit_multiple``) priced at each candidate valuation."""
    if investment_amount <= 0:
        raise DomainError("investment amount must be positive")
    exit_value = projection.final_arr * exit_multiple

    out = []
    for valuation in valuations:
        equity = _ratio(investment_amount, valuation, "valuation")
        return_value = exit_value * equity
        out.append(ValuationScenario(
            valuation=valuation,
            equity=equity,
            exit_value=exit_value,
            return_value=return_value,
            return_multiple=return_value / investment_amount,
        ))
    return out


# --- Benchmarks -------------------------------------------------------------

def _ratio(num, den, what):
    if den <= 0:
        raise DomainError(f"{what}: denominator must be positive, got {den}")
    return num / den


def compare_benchmarks(projection: FinancialProjections,
                       benchmarks: IndustryBenchmarks) -> List[BenchmarkComparison]:
    gross_margin = _ratio(projection.total_gross_profit, projection.total_revenue, "gross margin")

    return [
        BenchmarkComparison(
            metric="ltv_cac_ratio",
            ours=projection.ltv_cac_ratio,
            industry=benchmarks.ltv_cac_ratio,
            multiple=_ratio(projection.ltv_cac_ratio, benchmarks.ltv_cac_ratio, "LTV/CAC"),
            higher_is_better=True,
        ),
        # shorter payback wins, so the ratio is inverted
        BenchmarkComparison(
            metric="payback_period",
            ours=projection.payback_period,
            industry=benchmarks.payback_period,
            multiple=_ratio(benchmarks.payback_period, projection.payback_period, "payback"),
            higher_is_better=False,
        ),
        BenchmarkComparison(
            metric="gross_margin",
            ours=gross_margin,
            industry=benchmarks.gross_margin,
            multiple=_ratio(gross_margin, benchmarks.gross_margin, "gross margin"),
            higher_is_better=True,
        ),
    ]


def competitive_advantage(ours, theirs):
    return dict(advantage=ours - theirs, multiplier=_ratio(ours, theirs, "competitor metric"))


# --- Growth helpers ---------------------------------------------------------

def viral_compound(initial_companies, viral_coefficient, months):
    growth = []
    current = initial_companies
    for _ in range(months):
        growth.append(current)
        current = current * (1 + viral_coefficient)
    return growth


def growth_rate(initial, final, periods):
    """Constant per-period rate that takes ``initial`` to ``final``."""
    if initial <= 0:
        raise DomainError(f"initial value must be positive, got {initial}")
    if periods <= 0:
        raise DomainError(f"period count must be positive, got {periods}")
    return (final / initial) ** (1 / periods) - 1


def cagr(initial_value, final_value, years):
    return growth_rate(initial_value, final_value, years)


def infrastructure_costs_by_stage(companies_per_month: Sequence[float], cost_per_company,
                                  credits_monthly=0.0) -> List[StageCostRow]:
    """Gross and net infra cost per month, with credits capped at each month's bill."""
    rows = []
    for i, companies in enumerate(companies_per_month):
        total_cost = companies * cost_per_company
        credits = min(total_cost, credits_monthly)
        rows.append(StageCostRow(
            month=i + 1,
            companies=companies,
            total_cost=total_cost,
            net_cost=total_cost - credits,
            credits=credits,
        ))
    return rows


def market_penetration(total_market, projected_companies: Sequence[float]) -> List[PenetrationPoint]:
    if total_market <= 0:
        raise DomainError("total market must be positive")
    return [
        PenetrationPoint(month=i + 1, companies=c, market_share=c / total_market)
        for i, c in enumerate(projected_companies)
    ]


# --- Base case --------------------------------------------------------------

def build_base_case(horizon: int = 12, benchmarks: Optional[IndustryBenchmarks] = None) -> BaseCase:
    """Reference results from the default parameters, built fresh on each call."""
    business = default_business_params()
    infra = default_infra_params()
    stages = default_growth_stages()
    projection = run_projection(business, infra, stages, horizon)
    return BaseCase(
        business=business,
        infra=infra,
        stages=stages,
        cac=calculate_cac(business),
        ltv=calculate_ltv(business, infra, stages),
        projection=projection,
        benchmarks=tuple(compare_benchmarks(projection, benchmarks or default_benchmarks())),
    )
