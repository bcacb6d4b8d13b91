"""Pytest fixtures for patrimoine tests."""

import copy
import json
import os
import sys
from importlib import resources

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from patrimoine.application.services.economy import (  # noqa: E402
    BetaRandomizer,
    DeterministicEconomyModel,
    EconomyConfig,
)
from patrimoine.domain.calculator.taxes import FiscalModel  # noqa: E402
from patrimoine.domain.models.family import Adult, Child, Expense, Family, Salary, TurnOver  # noqa: E402
from patrimoine.domain.models.fiscal import FiscalConfig  # noqa: E402
from patrimoine.domain.models.patrimoine import (  # noqa: E402
    ContractualRate,
    Debt,
    FreeInvestment,
    LifeInsurance,
    Loan,
    MarketRate,
    Patrimoine,
    Pea,
    PeriodicInvestment,
    PlainAccount,
    RealEstateAsset,
    RentalRegime,
)

FIRST_YEAR = 2021


@pytest.fixture(scope="session")
def fiscal_config_data():
    """Fiscal model configuration as decoded from the packaged JSON (2020 grids)."""
    text = resources.files("patrimoine.data").joinpath("fiscal_model.json").read_text(encoding="utf-8")
    return json.loads(text)


@pytest.fixture
def fiscal_data(fiscal_config_data):
    """Mutable copy of the configuration, for tests altering a value."""
    return copy.deepcopy(fiscal_config_data)


@pytest.fixture
def fiscal_config(fiscal_config_data):
    return FiscalConfig.model_validate(fiscal_config_data)


@pytest.fixture
def fiscal_model(fiscal_config):
    return FiscalModel.from_config(fiscal_config)


@pytest.fixture
def first_year():
    return FIRST_YEAR


@pytest.fixture
def economy():
    """Constant economy: 1% inflation, 2% secured, 5% stocks."""
    return DeterministicEconomyModel(inflation_pct=1.0, secured_rate_pct=2.0, stock_rate_pct=5.0)


@pytest.fixture
def economy_config():
    return EconomyConfig(
        inflation=BetaRandomizer(min_pct=0.0, max_pct=4.0, alpha=2.0, beta=3.0, default_pct=1.5),
        secured_rate=BetaRandomizer(min_pct=0.0, max_pct=4.0, alpha=2.0, beta=2.0, default_pct=2.0),
        stock_rate=BetaRandomizer(min_pct=2.0, max_pct=10.0, alpha=2.0, beta=2.0, default_pct=6.0),
        secured_volatility_pct=1.0,
        stock_volatility_pct=15.0,
        simulate_volatility=False,
    )


@pytest.fixture
def sample_family():
    """Couple with two children."""
    return Family(
        adults=(
            Adult(
                name="Alice",
                birth_year=1975,
                work_income=Salary(taxable_salary=60_000, net_salary=48_000),
                retirement_year=2040,
                pension=30_000,
            ),
            Adult(
                name="Bruno",
                birth_year=1977,
                work_income=TurnOver(bnc=40_000),
                retirement_year=2042,
                pension=20_000,
            ),
        ),
        children=(
            Child(name="Chloé", birth_year=2008),
            Child(name="David", birth_year=2012),
        ),
        expenses=(
            Expense(name="Vie courante", amount=45_000),
            Expense(name="Études", amount=6_000, first_year=2026, last_year=2035),
        ),
    )


@pytest.fixture
def sample_patrimoine():
    """Financial envelopes, real estate and liabilities of the sample family."""
    return Patrimoine(
        free_investments=(
            FreeInvestment(
                name="Livret",
                envelope=PlainAccount(),
                interest_rate_type=ContractualRate(rate_pct=1.0),
                initial_value=20_000,
                owners={"Alice": 0.5, "Bruno": 0.5},
            ),
            FreeInvestment(
                name="Assurance vie",
                envelope=LifeInsurance(),
                interest_rate_type=MarketRate(stock_ratio_pct=50.0),
                initial_value=100_000,
                initial_interest=20_000,
                owners={"Alice": 0.5, "Bruno": 0.5},
            ),
            FreeInvestment(
                name="PEA",
                envelope=Pea(),
                interest_rate_type=MarketRate(stock_ratio_pct=100.0),
                initial_value=30_000,
                initial_interest=5_000,
                owners={"Alice": 1.0},
            ),
        ),
        periodic_investments=(
            PeriodicInvestment(
                name="Épargne retraite",
                interest_rate_type=ContractualRate(rate_pct=2.0),
                yearly_payment=3_000,
                first_year=2020,
                last_year=2030,
                owners={"Alice": 1.0},
            ),
        ),
        real_estates=(
            RealEstateAsset(
                name="Résidence principale",
                buying_price=400_000,
                buying_year=2010,
                is_main_residence=True,
                yearly_local_taxes=2_000,
                owners={"Alice": 0.5, "Bruno": 0.5},
            ),
            RealEstateAsset(
                name="Studio",
                buying_price=150_000,
                buying_year=2015,
                selling_year=2028,
                yearly_local_taxes=800,
                yearly_rent=7_200,
                owners={"Bruno": 1.0},
            ),
            RealEstateAsset(
                name="Local SCI",
                buying_price=200_000,
                buying_year=2018,
                yearly_local_taxes=1_200,
                yearly_rent=10_000,
                rental_regime=RentalRegime.COMPANY,
                owners={"Alice": 0.5, "Bruno": 0.5},
            ),
        ),
        loans=(
            Loan(
                name="Prêt résidence",
                loaned_value=-200_000,
                annual_rate_pct=1.5,
                first_year=2010,
                last_year=2029,
            ),
        ),
        debts=(Debt(name="Prêt familial", value=-5_000),),
    )
