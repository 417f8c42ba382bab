# growthsim/params.py
from dataclasses import dataclass, fields
from typing import Optional, Sequence, Tuple

from growthsim.errors import ConfigurationError, RangeError


@dataclass(frozen=True)
class BusinessParameters:
    # Viral funnel
    viral_coefficient: float
    formation_conversion_rate: float
    view_to_signup_rate: float
    organic_multiplier: float

    # Retention
    monthly_churn_rate: float
    average_companies_per_founder: float

    # Pricing
    basic_tier_price: float
    pro_tier_price: float
    pro_tier_adoption_rate: float
    formation_fee: float

    # Marketing
    monthly_marketing_spend: float
    base_video_views: float


@dataclass(frozen=True)
class InfrastructureParameters:
    # Formation costs
    state_filing_fee: float
    identity_verification: float
    infrastructure_per_formation: float
    payment_processing_rate: float

    # Monthly cost per company
    compute_cost_per_company: float
    storage_cost_per_company: float
    database_cost_per_company: float
    cdn_cost_per_company: float
    communication_cost_per_company: float

    # Stage levers
    aws_credits_monthly: float
    self_hosting_savings_rate: float
    self_hosting_setup_cost: float

    monthly_fixed_costs: float


@dataclass(frozen=True)
class GrowthStage:
    name: str
    start_month: int
    end_month: int  # inclusive
    aws_credits_active: bool
    self_hosting_active: bool
    pricing_multiplier: float = 1.0

    def contains(self, month: int) -> bool:
        return self.start_month <= month <= self.end_month


@dataclass(frozen=True)
class IndustryBenchmarks:
    ltv_cac_ratio: float
    payback_period: float  # months
    gross_margin: float


@dataclass(frozen=True)
class InvestmentTerms:
    investment_amount: float
    premoney_valuation: float
    exit_multiples: Tuple[float, ...]


@dataclass(frozen=True)
class SensitivityRanges:
    """Each range is ordered [pessimistic, base, optimistic]."""

    formation_rate: Tuple[float, float, float]
    viral_coefficient: Tuple[float, float, float]
    churn_rate: Tuple[float, float, float]
    pro_tier: Tuple[float, float, float]
    marketing_efficiency: Tuple[float, float, float]  # multiplier on view_to_signup_rate


def default_business_params():
    return BusinessParameters(
        viral_coefficient=0.4,
        formation_conversion_rate=0.30,
        view_to_signup_rate=0.005,
        organic_multiplier=3,
        monthly_churn_rate=0.08,
        average_companies_per_founder=2.5,
        basic_tier_price=20,     # per month
        pro_tier_price=100,      # per month
        pro_tier_adoption_rate=0.30,
        formation_fee=120,       # one-time
        monthly_marketing_spend=5_000,
        base_video_views=100_000,
    )


def default_infra_params():
    return InfrastructureParameters(
        state_filing_fee=80,
        identity_verification=1.50,
        infrastructure_per_formation=3.51,
        payment_processing_rate=0.03,
        compute_cost_per_company=0.0597,
        storage_cost_per_company=0.118,
        database_cost_per_company=2.05,
        cdn_cost_per_company=1.225,
        communication_cost_per_company=8.4,  # email / sms / voice
        aws_credits_monthly=8_333,
        self_hosting_savings_rate=0.875,
        self_hosting_setup_cost=2_000_000,
        monthly_fixed_costs=135,
    )


def three_stage_plan(credits_end=12, self_hosting_start=25, end_month=36, paid_pricing_multiplier=1.5):
    """Credits -> paid cloud -> self-hosted. The paid stage is dropped when it would be empty."""
    if not 1 <= credits_end < self_hosting_start <= end_month:
        raise ConfigurationError(
            f"need 1 <= credits_end < self_hosting_start <= end_month, got "
            f"{credits_end}, {self_hosting_start}, {end_month}"
        )
    stages = [GrowthStage("Stage 1: AWS Credits", 1, credits_end,
                          aws_credits_active=True, self_hosting_active=False, pricing_multiplier=1.0)]
    if self_hosting_start > credits_end + 1:
        stages.append(GrowthStage("Stage 2: Paid AWS", credits_end + 1, self_hosting_start - 1,
                                  aws_credits_active=False, self_hosting_active=False,
                                  pricing_multiplier=paid_pricing_multiplier))
    stages.append(GrowthStage("Stage 3: Self-Hosted", self_hosting_start, end_month,
                              aws_credits_active=False, self_hosting_active=True,
                              pricing_multiplier=paid_pricing_multiplier))
    return tuple(stages)


def default_growth_stages():
    return three_stage_plan()


def default_benchmarks():
    return IndustryBenchmarks(
        ltv_cac_ratio=3.5,
        payback_period=15,
        gross_margin=0.79,
    )


def default_investment_terms():
    return InvestmentTerms(
        investment_amount=50_000,
        premoney_valuation=2_000_000,
        exit_multiples=(10, 8, 6),  # year 1..3 revenue multiples
    )


def default_sensitivity_ranges():
    return SensitivityRanges(
        formation_rate=(0.20, 0.30, 0.40),
        viral_coefficient=(0.2, 0.4, 0.6),
        churn_rate=(0.12, 0.08, 0.05),
        pro_tier=(0.20, 0.30, 0.40),
        marketing_efficiency=(0.5, 1.0, 1.5),
    )


# --- Boundary validation ----------------------------------------------------

_BUSINESS_RATES = (
    "formation_conversion_rate",
    "view_to_signup_rate",
    "monthly_churn_rate",
    "pro_tier_adoption_rate",
)
_INFRA_RATES = ("payment_processing_rate", "self_hosting_savings_rate")


def _check_fields(params, rates):
    for f in fields(params):
        value = getattr(params, f.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value < 0:
            raise RangeError(f"{f.name} must be non-negative, got {value}")
        if f.name in rates and value > 1:
            raise RangeError(f"{f.name} must be a fraction in [0, 1], got {value}")


def validate_business_params(business: BusinessParameters) -> None:
    _check_fields(business, _BUSINESS_RATES)


def validate_infra_params(infra: InfrastructureParameters) -> None:
    _check_fields(infra, _INFRA_RATES)


def validate_stages(stages: Sequence[GrowthStage]) -> None:
    """Stages must be non-empty, ordered, non-overlapping and contiguous.

    Months before the first stage or after the last one are left to the
    engine's fallback policy; holes between stages are rejected here.
    """
    if not stages:
        raise ConfigurationError("at least one growth stage is required")
    prev: Optional[GrowthStage] = None
    for stage in stages:
        if stage.end_month < stage.start_month:
            raise ConfigurationError(
                f"stage {stage.name!r} ends (month {stage.end_month}) before it starts "
                f"(month {stage.start_month})"
            )
        if stage.pricing_multiplier < 0:
            raise RangeError(f"stage {stage.name!r} has a negative pricing multiplier")
        if prev is not None:
            if stage.start_month <= prev.end_month:
                raise ConfigurationError(f"stages {prev.name!r} and {stage.name!r} overlap")
            if stage.start_month != prev.end_month + 1:
                raise ConfigurationError(
                    f"months {prev.end_month + 1}..{stage.start_month - 1} are not covered "
                    f"between {prev.name!r} and {stage.name!r}"
                )
        prev = stage
