"""
Tests for the team cost schedule.
"""

from dataclasses import replace

import pytest

from growthsim.errors import ConfigurationError
from growthsim.payroll import (
    Employee,
    EmployeeParameters,
    calculate_employee_costs,
    employees_by_phase,
    default_employee_params,
    operating_schedule,
    scenario_for_amount,
    with_investment,
)
from growthsim.sim import run_projection


@pytest.fixture
def team():
    return default_employee_params()


def test_pre_investment_month(team):
    costs = calculate_employee_costs(team, -3)
    assert costs.phase == "pre-launch"
    assert costs.active_roles == ("Technical Contractor",)
    assert costs.total_cost == 2_000


def test_investment_month(team):
    costs = calculate_employee_costs(team, 0)
    assert costs.phase == "post-investment"
    assert costs.total_cost == 2_000 + 5_000 + 2_000 + 3_000 + 4_000


def test_launch_month_adds_marketing(team):
    costs = calculate_employee_costs(team, 1)
    assert "technical_contractor" not in costs.breakdown
    assert costs.breakdown["marketing_&_content"] == 5_000
    assert costs.total_cost == 19_000


def test_mrr_gated_hire(team):
    assert "customer_success_manager" not in calculate_employee_costs(team, 6, 99_999).breakdown
    costs = calculate_employee_costs(team, 6, 100_000)
    assert costs.breakdown["customer_success_manager"] == 3_500
    assert costs.total_cost == 22_500


def test_no_investment_drops_funded_roles(team):
    costs = calculate_employee_costs(team, 1, investment_received=False)
    assert costs.phase == "pre-launch"
    assert costs.total_cost == 7_000


def test_founder_salary_follows_scenario(team):
    bigger = with_investment(team, 100_000, investment_month=0)
    costs = calculate_employee_costs(bigger, 1)
    assert costs.breakdown["founder_salary"] == pytest.approx(7_500)


def test_unknown_amount_uses_moderate_scenario():
    assert scenario_for_amount(12_345).hiring_timeline == "moderate"


def test_operating_schedule(projection, team):
    df = operating_schedule(projection, team)

    assert list(df.index) == list(range(1, 13))
    assert (df["operating_income"] == df["gross_profit"] - df["team_cost"]).all()
    assert df["cum_operating_income"].iloc[-1] == pytest.approx(df["operating_income"].sum())
    # the projection's own gross profit is untouched
    assert df["gross_profit"].sum() == pytest.approx(projection.total_gross_profit)


def test_launch_month_shifts_the_timeline(projection, team):
    late = replace(team, launch_month=6)
    df = operating_schedule(projection, late)

    assert list(df["timeline_month"]) == list(range(6, 18))
    # projection month 1 is costed as timeline month 6
    first = calculate_employee_costs(late, 6, projection.cohorts[0].monthly_recurring_revenue)
    assert df["team_cost"].iloc[0] == pytest.approx(first.total_cost)


def test_team_costs_leave_gross_profit_untouched(business, infra, stages, team):
    long_run = run_projection(business, infra, stages, 36)
    df = operating_schedule(long_run, team)

    assert len(df) == 36
    assert df["gross_profit"].sum() == pytest.approx(long_run.total_gross_profit)
    assert list(df["gross_profit"]) == [c.gross_profit for c in long_run.cohorts]


def test_colliding_role_keys_are_summed():
    params = EmployeeParameters(
        employees=(
            Employee("Support Agent", 1_000, start_month=0),
            Employee("support  agent", 1_500, start_month=0),
        ),
        launch_month=1,
        investment_month=0,
        investment_amount=50_000,
    )
    costs = calculate_employee_costs(params, 1)

    assert costs.breakdown == {"support_agent": 2_500}
    assert sum(costs.breakdown.values()) == costs.total_cost
    assert len(costs.active_roles) == 2


def test_breakdown_matches_total_every_month(team):
    for month in range(-6, 25):
        costs = calculate_employee_costs(team, month, 1_000_000)
        assert sum(costs.breakdown.values()) == pytest.approx(costs.total_cost)


def test_employees_by_phase(team):
    pre = employees_by_phase(team, "pre-launch")
    post = employees_by_phase(team, "post-investment")

    assert [e.role for e in pre] == ["Technical Contractor"]
    assert "Technical Contractor" not in [e.role for e in post]
    assert len(pre) + len(post) == len(team.employees)


def test_employees_by_phase_after_later_investment(team):
    later = with_investment(team, 50_000, investment_month=3)
    pre = {e.role for e in employees_by_phase(later, "pre-launch")}
    assert pre == {"Technical Contractor", "Technical Contractor (Continued)", "Marketing & Content"}


def test_employees_by_phase_rejects_unknown_phase(team):
    with pytest.raises(ConfigurationError):
        employees_by_phase(team, "post-exit")


def test_end_month_zero_stops_after_month_zero():
    params = EmployeeParameters(
        employees=(Employee("Bridge Contractor", 1_000, start_month=-2, end_month=0),),
        launch_month=1,
        investment_month=0,
        investment_amount=50_000,
    )

    assert calculate_employee_costs(params, 0).total_cost == 1_000
    assert calculate_employee_costs(params, 1).total_cost == 0
