"""Helpers for CLI scripts to collect projection parameters."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from growthsim.params import (
    BusinessParameters,
    InfrastructureParameters,
    default_business_params,
    default_infra_params,
    three_stage_plan,
)


def _add_toggle(parser: argparse.ArgumentParser, name: str, default: bool, help_text: str) -> None:
    parser.set_defaults(**{name: default})
    if default:
        flag = f"--no-{name.replace('_', '-')}"
        parser.add_argument(
            flag,
            dest=name,
            action="store_false",
            help=f"Disable {help_text} (default: enabled)",
        )
    else:
        flag = f"--{name.replace('_', '-')}"
        parser.add_argument(
            flag,
            dest=name,
            action="store_true",
            help=f"Enable {help_text} (default: disabled)",
        )


def build_parser(description: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=description)
    biz = default_business_params()
    infra = default_infra_params()

    p.add_argument("--horizon-months", type=int, default=12,
                   help="Projection horizon in months (default: 12).")

    # Funnel
    p.add_argument("--viral-coefficient", type=float, default=biz.viral_coefficient,
                   help="Viral K-factor (default: 0.4).")
    p.add_argument("--formation-conversion", type=float, default=biz.formation_conversion_rate * 100,
                   help="Signup to formation conversion percentage (default: 30).")
    p.add_argument("--view-to-signup", type=float, default=biz.view_to_signup_rate * 100,
                   help="View to signup percentage (default: 0.5).")
    p.add_argument("--organic-multiplier", type=float, default=biz.organic_multiplier,
                   help="Organic reach multiplier on base views (default: 3).")
    p.add_argument("--base-video-views", type=float, default=biz.base_video_views,
                   help="Monthly base video views (default: 100000).")
    p.add_argument("--marketing-spend", type=float, default=biz.monthly_marketing_spend,
                   help="Monthly marketing spend in USD (default: 5000).")

    # Retention & pricing
    p.add_argument("--churn", type=float, default=biz.monthly_churn_rate * 100,
                   help="Monthly churn percentage (default: 8).")
    p.add_argument("--companies-per-founder", type=float, default=biz.average_companies_per_founder,
                   help="Average companies per founder (default: 2.5).")
    p.add_argument("--basic-price", type=float, default=biz.basic_tier_price,
                   help="Basic tier price in USD/month (default: 20).")
    p.add_argument("--pro-price", type=float, default=biz.pro_tier_price,
                   help="Pro tier price in USD/month (default: 100).")
    p.add_argument("--pro-adoption", type=float, default=biz.pro_tier_adoption_rate * 100,
                   help="Pro tier adoption percentage (default: 30).")
    p.add_argument("--formation-fee", type=float, default=biz.formation_fee,
                   help="One-time formation fee in USD (default: 120).")

    # Infrastructure
    p.add_argument("--aws-credits", type=float, default=infra.aws_credits_monthly,
                   help="Monthly cloud credits cap in USD (default: 8333).")
    p.add_argument("--self-hosting-savings", type=float, default=infra.self_hosting_savings_rate * 100,
                   help="Self-hosting infrastructure savings percentage (default: 87.5).")
    p.add_argument("--fixed-costs", type=float, default=infra.monthly_fixed_costs,
                   help="Fixed monthly third-party costs in USD (default: 135).")

    # Stages
    p.add_argument("--credits-end-month", type=int, default=12,
                   help="Last month of the credits stage (default: 12).")
    p.add_argument("--self-hosting-month", type=int, default=25,
                   help="First self-hosted month (default: 25).")
    p.add_argument("--stage-end-month", type=int, default=36,
                   help="Last month covered by the stage plan (default: 36).")
    p.add_argument("--price-increase", type=float, default=50.0,
                   help="Price increase percentage after credits expire (default: 50).")
    _add_toggle(p, "stage_fallback", True, "first-stage fallback for months outside the stage plan")

    return p


def args_to_params(args: argparse.Namespace) -> Dict[str, Any]:
    infra = default_infra_params()

    business = BusinessParameters(
        viral_coefficient=float(args.viral_coefficient),
        formation_conversion_rate=float(args.formation_conversion) / 100.0,
        view_to_signup_rate=float(args.view_to_signup) / 100.0,
        organic_multiplier=float(args.organic_multiplier),
        monthly_churn_rate=float(args.churn) / 100.0,
        average_companies_per_founder=float(args.companies_per_founder),
        basic_tier_price=float(args.basic_price),
        pro_tier_price=float(args.pro_price),
        pro_tier_adoption_rate=float(args.pro_adoption) / 100.0,
        formation_fee=float(args.formation_fee),
        monthly_marketing_spend=float(args.marketing_spend),
        base_video_views=float(args.base_video_views),
    )

    infra_params = InfrastructureParameters(
        state_filing_fee=infra.state_filing_fee,
        identity_verification=infra.identity_verification,
        infrastructure_per_formation=infra.infrastructure_per_formation,
        payment_processing_rate=infra.payment_processing_rate,
        compute_cost_per_company=infra.compute_cost_per_company,
        storage_cost_per_company=infra.storage_cost_per_company,
        database_cost_per_company=infra.database_cost_per_company,
        cdn_cost_per_company=infra.cdn_cost_per_company,
        communication_cost_per_company=infra.communication_cost_per_company,
        aws_credits_monthly=float(args.aws_credits),
        self_hosting_savings_rate=float(args.self_hosting_savings) / 100.0,
        self_hosting_setup_cost=infra.self_hosting_setup_cost,
        monthly_fixed_costs=float(args.fixed_costs),
    )

    stages = three_stage_plan(
        credits_end=int(args.credits_end_month),
        self_hosting_start=int(args.self_hosting_month),
        end_month=int(args.stage_end_month),
        paid_pricing_multiplier=1.0 + float(args.price_increase) / 100.0,
    )

    return dict(
        business=business,
        infra=infra_params,
        stages=stages,
        horizon=int(args.horizon_months),
        allow_stage_fallback=bool(args.stage_fallback),
    )
