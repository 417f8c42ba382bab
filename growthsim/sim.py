# growthsim/sim.py
import logging
from dataclasses import asdict, dataclass
from typing import Sequence, Tuple

import pandas as pd

from growthsim.calculators import (
    calculate_cac,
    calculate_infrastructure_cost,
    calculate_ltv,
    calculate_saas_revenue,
    formation_cost_per_company,
)
from growthsim.errors import ConfigurationError, DomainError
from growthsim.params import (
    BusinessParameters,
    GrowthStage,
    InfrastructureParameters,
    validate_business_params,
    validate_infra_params,
    validate_stages,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageResolution:
    stage: GrowthStage
    fallback: bool


@dataclass(frozen=True)
class MonthlyCohort:
    month: int
    new_companies: float
    total_companies: float
    formation_revenue: float
    monthly_recurring_revenue: float
    total_revenue: float
    gross_profit: float
    infrastructure_cost: float
    viral_contribution: float
    direct_acquisition: float
    stage_name: str
    stage_fallback: bool


@dataclass(frozen=True)
class FinancialProjections:
    time_horizon: int
    cohorts: Tuple[MonthlyCohort, ...]
    total_revenue: float
    total_gross_profit: float
    total_infrastructure_cost: float
    final_mrr: float
    final_arr: float
    company_count: float
    ltv: float  # per founder
    cac: float  # per founder
    ltv_cac_ratio: float
    payback_period: float  # months


def resolve_stage(stages: Sequence[GrowthStage], month: int) -> StageResolution:
    """Stage whose range contains ``month``; otherwise the first stage, flagged as a fallback."""
    if not stages:
        raise ConfigurationError("cannot resolve a month against an empty stage list")
    for stage in stages:
        if stage.contains(month):
            return StageResolution(stage, fallback=False)
    return StageResolution(stages[0], fallback=True)


def base_viral_companies(existing_companies, viral_coefficient):
    """Monthly referrals from the installed base (annual K pro-rated over 12 months)."""
    return existing_companies * viral_coefficient / 12.0


def run_projection(business: BusinessParameters, infra: InfrastructureParameters,
                   stages: Sequence[GrowthStage], horizon: int,
                   allow_stage_fallback: bool = True) -> FinancialProjections:
    if horizon != int(horizon):
        raise ConfigurationError(f"projection horizon must be a whole number of months, got {horizon}")
    horizon = int(horizon)
    if horizon < 1:
        raise ConfigurationError(f"projection horizon must be at least 1 month, got {horizon}")
    validate_business_params(business)
    validate_infra_params(infra)
    validate_stages(stages)

    cac = calculate_cac(business)
    unit_formation_cost = formation_cost_per_company(infra, business.formation_fee)
    churn = business.monthly_churn_rate
    logger.debug("Running %d-month projection across %d stages", horizon, len(stages))

    running_total = 0.0
    cum_revenue = 0.0
    cum_gross_profit = 0.0
    cum_infra = 0.0
    cohorts = []

    for month in range(1, horizon + 1):
        resolved = resolve_stage(stages, month)
        if resolved.fallback:
            if not allow_stage_fallback:
                raise ConfigurationError(f"no growth stage covers month {month}")
            logger.warning("No stage covers month %d; falling back to %r", month, resolved.stage.name)
        stage = resolved.stage

        # Direct acquisition is held at the CAC funnel's monthly figure
        direct_new = cac.direct_companies
        viral_new = base_viral_companies(running_total, business.viral_coefficient)
        new_companies = direct_new + viral_new

        # Churn hits the existing base only
        running_total = running_total * (1 - churn) + new_companies

        formation_revenue = new_companies * business.formation_fee
        saas = calculate_saas_revenue(business, running_total, stage.pricing_multiplier)

        formation_cogs = new_companies * unit_formation_cost
        saas_processing = saas.total_revenue * infra.payment_processing_rate
        infra_cost = calculate_infrastructure_cost(running_total, infra, stage)

        revenue = formation_revenue + saas.total_revenue
        gross_profit = revenue - (formation_cogs + saas_processing + infra_cost.net_cost)

        cum_revenue += revenue
        cum_gross_profit += gross_profit
        cum_infra += infra_cost.net_cost

        cohorts.append(MonthlyCohort(
            month=month,
            new_companies=new_companies,
            total_companies=running_total,
            formation_revenue=formation_revenue,
            monthly_recurring_revenue=saas.total_revenue,
            total_revenue=revenue,
            gross_profit=gross_profit,
            infrastructure_cost=infra_cost.net_cost,
            viral_contribution=viral_new,
            direct_acquisition=direct_new,
            stage_name=stage.name,
            stage_fallback=resolved.fallback,
        ))

    ltv = calculate_ltv(business, infra, stages)
    final_mrr = cohorts[-1].monthly_recurring_revenue

    if running_total <= 0:
        raise DomainError("projection ends with no companies; per-company ratios are undefined")
    if final_mrr <= 0:
        raise DomainError("final MRR is zero; payback period is undefined")
    if cac.cac_per_founder <= 0:
        raise DomainError("CAC per founder is zero; LTV/CAC is undefined")

    # Payback uses the terminal month's contribution per founder only
    mrr_per_founder = final_mrr / running_total * business.average_companies_per_founder
    payback = cac.cac_per_founder / mrr_per_founder

    logger.debug("Projection done: %.1f companies, final MRR %.2f", running_total, final_mrr)
    return FinancialProjections(
        time_horizon=horizon,
        cohorts=tuple(cohorts),
        total_revenue=cum_revenue,
        total_gross_profit=cum_gross_profit,
        total_infrastructure_cost=cum_infra,
        final_mrr=final_mrr,
        final_arr=final_mrr * 12,
        company_count=running_total,
        ltv=ltv.ltv_per_founder,
        cac=cac.cac_per_founder,
        ltv_cac_ratio=ltv.ltv_per_founder / cac.cac_per_founder,
        payback_period=payback,
    )


def projection_frame(projection: FinancialProjections) -> pd.DataFrame:
    df = pd.DataFrame([asdict(c) for c in projection.cohorts]).set_index("month")
    df["annual_run_rate"] = df["monthly_recurring_revenue"] * 12
    df["cum_revenue"] = df["total_revenue"].cumsum()
    df["cum_gross_profit"] = df["gross_profit"].cumsum()
    return df


def summarize_projection(projection: FinancialProjections, business: BusinessParameters) -> pd.DataFrame:
    if projection.total_revenue <= 0:
        raise DomainError("no revenue in projection; gross margin is undefined")
    gross_margin = projection.total_gross_profit / projection.total_revenue

    return pd.DataFrame({
        "Metric": [
            "cac_per_founder",
            "ltv_per_founder",
            "ltv_cac_ratio",
            "payback_period_months",
            "final_mrr",
            "final_arr",
            "total_revenue",
            "total_gross_profit",
            "gross_margin",
            "total_infrastructure_cost",
            "company_count",
            "founder_count",
        ],
        "Value": [
            projection.cac,
            projection.ltv,
            projection.ltv_cac_ratio,
            projection.payback_period,
            projection.final_mrr,
            projection.final_arr,
            projection.total_revenue,
            projection.total_gross_profit,
            gross_margin,
            projection.total_infrastructure_cost,
            projection.company_count,
            projection.company_count / business.average_companies_per_founder,
        ],
    })
