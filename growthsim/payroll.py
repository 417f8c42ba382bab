# growthsim/payroll.py
"""Team cost schedule layered on top of a projection.

Team costs sit below gross profit: they never change the projection's own
figures, only the operating income derived from them.
"""
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

import pandas as pd

from growthsim.errors import ConfigurationError
from growthsim.sim import FinancialProjections

FOUNDER_ROLE = "Founder Salary"


@dataclass(frozen=True)
class Employee:
    role: str
    monthly_cost: float
    start_month: int  # relative to launch; negative = pre-launch
    end_month: Optional[int] = None
    required_mrr: Optional[float] = None
    investment_required: bool = False


@dataclass(frozen=True)
class EmployeeParameters:
    employees: Tuple[Employee, ...]
    launch_month: int  # timeline month of projection month 1
    investment_month: int
    investment_amount: float


@dataclass(frozen=True)
class EmployeeCostScenario:
    amount: float
    founder_salary_multiplier: float
    hiring_timeline: str  # conservative / moderate / aggressive
    burn_rate_target: float  # max monthly burn as a fraction of the investment


@dataclass(frozen=True)
class EmployeeCosts:
    total_cost: float
    phase: str
    breakdown: Dict[str, float]
    active_roles: Tuple[str, ...]


def default_employee_params():
    return EmployeeParameters(
        employees=(
            Employee("Technical Contractor", 2_000, start_month=-6, end_month=0),
            Employee(FOUNDER_ROLE, 5_000, start_month=0, investment_required=True),
            Employee("Technical Contractor (Continued)", 2_000, start_month=0),
            Employee("Legal Counsel", 3_000, start_month=0, investment_required=True),
            Employee("Compliance Specialist", 4_000, start_month=0, investment_required=True),
            Employee("Marketing & Content", 5_000, start_month=1),
            Employee("Customer Success Manager", 3_500, start_month=6, required_mrr=100_000),
            Employee("Marketing Manager", 4_500, start_month=9, required_mrr=200_000),
            Employee("Senior Developer", 8_000, start_month=12, required_mrr=400_000),
            Employee("Sales Manager", 5_000, start_month=18, required_mrr=600_000),
        ),
        launch_month=1,
        investment_month=0,
        investment_amount=50_000,
    )


def default_cost_scenarios():
    return (
        EmployeeCostScenario(25_000, 0.6, "conservative", 0.15),
        EmployeeCostScenario(50_000, 1.0, "moderate", 0.20),
        EmployeeCostScenario(100_000, 1.5, "aggressive", 0.25),
        EmployeeCostScenario(250_000, 2.0, "aggressive", 0.30),
    )


def scenario_for_amount(amount) -> EmployeeCostScenario:
    scenarios = default_cost_scenarios()
    for s in scenarios:
        if s.amount == amount:
            return s
    return scenarios[1]


def with_investment(params: EmployeeParameters, amount, investment_month=3) -> EmployeeParameters:
    return replace(params, investment_amount=amount, investment_month=investment_month)


def employees_by_phase(params: EmployeeParameters, phase) -> Tuple[Employee, ...]:
    """Roles planned before the investment lands, or those that start with or after it."""
    if phase == "pre-launch":
        return tuple(e for e in params.employees
                     if e.start_month < params.investment_month and not e.investment_required)
    if phase == "post-investment":
        return tuple(e for e in params.employees
                     if e.investment_required or e.start_month >= params.investment_month)
    raise ConfigurationError(f"unknown phase {phase!r}")


def _is_active(employee: Employee, params: EmployeeParameters, month, current_mrr, investment_received):
    if month < employee.start_month:
        return False
    if employee.end_month is not None and month > employee.end_month:
        return False
    if employee.investment_required and not (investment_received and month >= params.investment_month):
        return False
    if employee.required_mrr is not None and current_mrr < employee.required_mrr:
        return False
    return True


def _breakdown_key(role):
    return "_".join(role.lower().split())


def calculate_employee_costs(params: EmployeeParameters, month, current_mrr=0.0,
                             scenario: Optional[EmployeeCostScenario] = None,
                             investment_received=True) -> EmployeeCosts:
    scenario = scenario or scenario_for_amount(params.investment_amount)
    if month < params.investment_month or not investment_received:
        phase = "pre-launch"
    else:
        phase = "post-investment"

    breakdown = {}
    active = []
    total = 0.0
    for employee in params.employees:
        if not _is_active(employee, params, month, current_mrr, investment_received):
            continue
        cost = employee.monthly_cost
        if employee.role == FOUNDER_ROLE:
            cost *= scenario.founder_salary_multiplier
        # roles that normalise to the same key are summed
        key = _breakdown_key(employee.role)
        breakdown[key] = breakdown.get(key, 0.0) + cost
        active.append(employee.role)
        total += cost

    return EmployeeCosts(total_cost=total, phase=phase, breakdown=breakdown, active_roles=tuple(active))


def operating_schedule(projection: FinancialProjections, params: EmployeeParameters,
                       scenario: Optional[EmployeeCostScenario] = None) -> pd.DataFrame:
    """Gross profit less team cost for each projected month.

    Projection month m maps to timeline month launch_month + m - 1. Revenue-gated
    hires are tested against the same month's MRR.
    """
    rows = []
    for cohort in projection.cohorts:
        timeline_month = params.launch_month + cohort.month - 1
        team = calculate_employee_costs(params, timeline_month, cohort.monthly_recurring_revenue, scenario)
        rows.append({
            "month": cohort.month,
            "timeline_month": timeline_month,
            "gross_profit": cohort.gross_profit,
            "team_cost": team.total_cost,
            "headcount": len(team.active_roles),
            "operating_income": cohort.gross_profit - team.total_cost,
        })
    df = pd.DataFrame(rows).set_index("month")
    df["cum_operating_income"] = df["operating_income"].cumsum()
    return df
