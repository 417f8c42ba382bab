"""
Shared fixtures: default parameter sets and a 12-month reference projection.
"""

import pytest

from growthsim.params import (
    default_business_params,
    default_growth_stages,
    default_infra_params,
)
from growthsim.sim import run_projection


@pytest.fixture
def business():
    return default_business_params()


@pytest.fixture
def infra():
    return default_infra_params()


@pytest.fixture
def stages():
    return default_growth_stages()


@pytest.fixture
def projection(business, infra, stages):
    return run_projection(business, infra, stages, 12)
