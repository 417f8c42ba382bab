# growthsim/calculators.py
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from growthsim.errors import ConfigurationError, DomainError, RangeError
from growthsim.params import BusinessParameters, GrowthStage, InfrastructureParameters

LTV_COHORT_MONTHS = 12


@dataclass(frozen=True)
class CACResult:
    total_views: float
    signups: float
    direct_companies: float
    viral_companies: float
    total_companies: float
    cac_per_company: float
    cac_per_founder: float


@dataclass(frozen=True)
class SaaSRevenue:
    basic_revenue: float
    pro_revenue: float
    total_revenue: float
    average_price: float


@dataclass(frozen=True)
class InfrastructureCost:
    total_cost: float
    cost_per_company: float
    net_cost: float
    credits_applied: float
    self_hosting_savings: float


@dataclass(frozen=True)
class FormationEconomics:
    revenue: float
    cogs: float
    gross_profit: float
    margin: float


@dataclass(frozen=True)
class LTVResult:
    formation_ltv: float
    stage_ltvs: Tuple[float, ...]
    stage_monthly_profits: Tuple[float, ...]
    blended_ltv: float
    ltv_per_founder: float


# --- Pricing & cost helpers -------------------------------------------------

def average_price(basic_price, pro_price, pro_adoption_rate):
    return basic_price * (1 - pro_adoption_rate) + pro_price * pro_adoption_rate


def infrastructure_cost_per_company(infra: InfrastructureParameters) -> float:
    return (
        infra.compute_cost_per_company
        + infra.storage_cost_per_company
        + infra.database_cost_per_company
        + infra.cdn_cost_per_company
        + infra.communication_cost_per_company
    )


def formation_cost_per_company(infra: InfrastructureParameters, formation_fee: float) -> float:
    return (
        infra.state_filing_fee
        + infra.identity_verification
        + infra.infrastructure_per_formation
        + formation_fee * infra.payment_processing_rate
    )


def formation_economics(infra: InfrastructureParameters, formation_fee: float) -> FormationEconomics:
    """Unit economics of a single formation (one-time fee minus its COGS)."""
    cogs = formation_cost_per_company(infra, formation_fee)
    gross_profit = formation_fee - cogs
    margin = gross_profit / formation_fee if formation_fee > 0 else 0.0
    return FormationEconomics(revenue=formation_fee, cogs=cogs, gross_profit=gross_profit, margin=margin)


# --- CAC --------------------------------------------------------------------

def signup_viral_companies(direct_companies, viral_coefficient):
    """Companies referred by this month's newly acquired ones (K applied to new signups)."""
    return direct_companies * viral_coefficient


def calculate_cac(business: BusinessParameters) -> CACResult:
    total_views = business.base_video_views * business.organic_multiplier
    signups = total_views * business.view_to_signup_rate
    direct = signups * business.formation_conversion_rate
    viral = signup_viral_companies(direct, business.viral_coefficient)
    total = direct + viral
    if total <= 0:
        raise DomainError("marketing funnel yields no companies; CAC is undefined")

    cac_per_company = business.monthly_marketing_spend / total
    return CACResult(
        total_views=total_views,
        signups=signups,
        direct_companies=direct,
        viral_companies=viral,
        total_companies=total,
        cac_per_company=cac_per_company,
        cac_per_founder=cac_per_company * business.average_companies_per_founder,
    )


# --- SaaS revenue -----------------------------------------------------------

def calculate_saas_revenue(business: BusinessParameters, company_count, pricing_multiplier=1.0) -> SaaSRevenue:
    if company_count < 0:
        raise RangeError(f"company count must be non-negative, got {company_count}")
    adoption = business.pro_tier_adoption_rate
    basic_price = business.basic_tier_price * pricing_multiplier
    pro_price = business.pro_tier_price * pricing_multiplier

    # fractional split, no rounding
    basic_companies = company_count * (1 - adoption)
    pro_companies = company_count * adoption
    basic_revenue = basic_companies * basic_price
    pro_revenue = pro_companies * pro_price
    return SaaSRevenue(
        basic_revenue=basic_revenue,
        pro_revenue=pro_revenue,
        total_revenue=basic_revenue + pro_revenue,
        average_price=average_price(basic_price, pro_price, adoption),
    )


# --- Infrastructure ---------------------------------------------------------

def calculate_infrastructure_cost(company_count, infra: InfrastructureParameters,
                                  stage: GrowthStage) -> InfrastructureCost:
    if company_count < 0:
        raise RangeError(f"company count must be non-negative, got {company_count}")
    base_per_company = infrastructure_cost_per_company(infra)
    cost_per_company = base_per_company
    if stage.self_hosting_active:
        cost_per_company = base_per_company * (1 - infra.self_hosting_savings_rate)

    total_cost = cost_per_company * company_count + infra.monthly_fixed_costs
    credits_applied = min(total_cost, infra.aws_credits_monthly) if stage.aws_credits_active else 0.0
    savings = (base_per_company - cost_per_company) * company_count if stage.self_hosting_active else 0.0

    return InfrastructureCost(
        total_cost=total_cost,
        cost_per_company=cost_per_company,
        net_cost=total_cost - credits_applied,
        credits_applied=credits_applied,
        self_hosting_savings=savings,
    )


# --- LTV --------------------------------------------------------------------

def stage_monthly_profit(business: BusinessParameters, infra: InfrastructureParameters,
                         stage: GrowthStage) -> float:
    """Gross profit of one subscribed company for one month under ``stage``."""
    price = average_price(
        business.basic_tier_price * stage.pricing_multiplier,
        business.pro_tier_price * stage.pricing_multiplier,
        business.pro_tier_adoption_rate,
    )
    processing = price * infra.payment_processing_rate
    if stage.aws_credits_active:
        infra_cost = 0.0
    else:
        infra_cost = infrastructure_cost_per_company(infra)
        if stage.self_hosting_active:
            infra_cost *= 1 - infra.self_hosting_savings_rate
    return price - processing - infra_cost


def retention_weights(churn_rate, months=LTV_COHORT_MONTHS):
    # month 1 is fully retained
    return (1 - churn_rate) ** np.arange(months)


def calculate_ltv(business: BusinessParameters, infra: InfrastructureParameters,
                  stages: Sequence[GrowthStage]) -> LTVResult:
    """
    Lifetime value per company and per founder.

    Each stage's LTV is its monthly profit over a 12-month cohort decayed by
    (1 - churn)^(m-1), with no discounting. The blended LTV adds the formation
    margin to the plain average of the stage LTVs; stage durations are not
    used as weights.
    """
    if not stages:
        raise ConfigurationError("LTV needs at least one growth stage")

    formation_ltv = formation_economics(infra, business.formation_fee).gross_profit
    weights = retention_weights(business.monthly_churn_rate)

    profits = tuple(stage_monthly_profit(business, infra, s) for s in stages)
    stage_ltvs = tuple(float(np.sum(p * weights)) for p in profits)
    blended = formation_ltv + sum(stage_ltvs) / len(stage_ltvs)

    return LTVResult(
        formation_ltv=formation_ltv,
        stage_ltvs=stage_ltvs,
        stage_monthly_profits=profits,
        blended_ltv=blended,
        ltv_per_founder=blended * business.average_companies_per_founder,
    )
