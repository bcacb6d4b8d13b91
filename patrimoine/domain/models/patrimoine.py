"""Assets and liabilities of the household.

Assets are held in financial envelopes (plain account, PEA, life insurance)
or are real estate. Every asset and liability is an immutable description;
the simulation keeps the run-scoped state (e.g. the current value of a free
investment) in `FreeInvestmentState`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from patrimoine.core.exceptions import InvalidParameterError
from patrimoine.core.financial import (
    future_value,
    loan_payment,
    pct_to_rate,
    residual_loan_value,
)

OWNERSHIP_TOLERANCE = 1e-6


class EnvelopeKind(str, Enum):
    """Closed set of financial envelopes."""

    PLAIN_ACCOUNT = "plain_account"
    PEA = "pea"
    LIFE_INSURANCE = "life_insurance"


class LifeInsuranceClause(BaseModel):
    """Beneficiary clause of a life-insurance contract.

    An empty list of beneficiaries is the standard clause: the surviving
    spouse, or else the children in equal parts.
    """

    beneficiaries: tuple[str, ...] = Field(default=())

    model_config = {
        "frozen": True,
    }


class PlainAccount(BaseModel):
    type: Literal["plain_account"] = "plain_account"

    model_config = {"frozen": True}

    def kind(self) -> EnvelopeKind:
        return EnvelopeKind.PLAIN_ACCOUNT

    def as_life_insurance_clause(self) -> Optional[LifeInsuranceClause]:
        return None


class Pea(BaseModel):
    type: Literal["pea"] = "pea"

    model_config = {"frozen": True}

    def kind(self) -> EnvelopeKind:
        return EnvelopeKind.PEA

    def as_life_insurance_clause(self) -> Optional[LifeInsuranceClause]:
        return None


class LifeInsurance(BaseModel):
    type: Literal["life_insurance"] = "life_insurance"
    clause: LifeInsuranceClause = Field(default_factory=LifeInsuranceClause)

    model_config = {"frozen": True}

    def kind(self) -> EnvelopeKind:
        return EnvelopeKind.LIFE_INSURANCE

    def as_life_insurance_clause(self) -> Optional[LifeInsuranceClause]:
        return self.clause


Envelope = Annotated[Union[PlainAccount, Pea, LifeInsurance], Field(discriminator="type")]


class ContractualRate(BaseModel):
    """Fixed contractual interest rate."""

    type: Literal["contractual"] = "contractual"
    rate_pct: float = Field(..., description="Yearly rate %")

    model_config = {"frozen": True}

    def rate(self, secured_rate: float, stock_rate: float) -> float:
        return pct_to_rate(self.rate_pct)


class MarketRate(BaseModel):
    """Rate following the market: a blend of stock and secured rates."""

    type: Literal["market"] = "market"
    stock_ratio_pct: float = Field(..., ge=0, le=100, description="Share of stocks %")

    model_config = {"frozen": True}

    def rate(self, secured_rate: float, stock_rate: float) -> float:
        stock = pct_to_rate(self.stock_ratio_pct)
        return stock * stock_rate + (1.0 - stock) * secured_rate


InterestRateType = Annotated[Union[ContractualRate, MarketRate], Field(discriminator="type")]


class Owned(BaseModel):
    """Mixin for items shared between family members."""

    owners: dict[str, float] = Field(default_factory=dict, description="Owner name -> fraction")

    model_config = {"frozen": True}

    @field_validator("owners")
    @classmethod
    def check_owners(cls, value: dict[str, float]) -> dict[str, float]:
        if not value:
            return value
        for name, fraction in value.items():
            if not 0.0 < fraction <= 1.0:
                raise ValueError(f"ownership fraction of '{name}' must be in ]0, 1]")
        if abs(sum(value.values()) - 1.0) > OWNERSHIP_TOLERANCE:
            raise ValueError("ownership fractions must sum to 1")
        return value

    def owned_fraction(self, name: str) -> float:
        return self.owners.get(name, 0.0)


class FreeInvestment(Owned):
    """Investment with free deposits and withdrawals."""

    name: str = Field(..., min_length=1)
    envelope: Envelope = Field(default_factory=PlainAccount)
    interest_rate_type: InterestRateType
    initial_value: float = Field(default=0.0, ge=0, description="Value at the start in €")
    initial_interest: float = Field(default=0.0, ge=0, description="Share of interests in initial_value")

    @model_validator(mode="after")
    def check_interest(self) -> FreeInvestment:
        if self.initial_interest > self.initial_value:
            raise ValueError("initial_interest cannot exceed initial_value")
        return self


class PeriodicInvestment(Owned):
    """Investment fed by fixed yearly payments, liquidated at `last_year`."""

    name: str = Field(..., min_length=1)
    envelope: Envelope = Field(default_factory=PlainAccount)
    interest_rate_type: InterestRateType
    yearly_payment: float = Field(default=0.0, ge=0, description="Payment made each year in €")
    first_year: int
    last_year: int
    initial_value: float = Field(default=0.0, ge=0)
    initial_interest: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_years(self) -> PeriodicInvestment:
        if self.last_year < self.first_year:
            raise ValueError("last_year must not precede first_year")
        return self

    def is_open(self, year: int) -> bool:
        return self.first_year <= year < self.last_year

    def payment(self, year: int) -> float:
        return self.yearly_payment if self.is_open(year) else 0.0

    def capitalized_value(self, year: int, rate: float) -> float:
        return future_value(
            payment=self.yearly_payment,
            rate=rate,
            periods=year - self.first_year,
            initial_value=self.initial_value,
        )

    def value_at_end_of(self, year: int, rate: float) -> float:
        """Value while open; 0 before opening and once liquidated."""
        if not self.is_open(year):
            return 0.0
        return self.capitalized_value(year, rate)

    def cumulated_interests(self, year: int, rate: float) -> float:
        paid = self.initial_value + self.yearly_payment * (year - self.first_year)
        return self.initial_interest + self.capitalized_value(year, rate) - paid


class RentalRegime(str, Enum):
    DIRECT = "direct"
    COMPANY = "company"


class RealEstateAsset(Owned):
    """Real estate, valued at its buying price indexed on inflation."""

    name: str = Field(..., min_length=1)
    buying_price: float = Field(..., ge=0, description="Buying price in €")
    buying_year: int
    selling_year: Optional[int] = Field(default=None, description="Year of sale, if any")
    is_main_residence: bool = False
    yearly_local_taxes: float = Field(default=0.0, ge=0, description="Yearly local taxes in € of the first simulated year")
    yearly_rent: float = Field(default=0.0, ge=0, description="Yearly rent in € of the first simulated year")
    rental_regime: RentalRegime = RentalRegime.DIRECT

    @model_validator(mode="after")
    def check_years(self) -> RealEstateAsset:
        if self.selling_year is not None and self.selling_year < self.buying_year:
            raise ValueError("selling_year must not precede buying_year")
        if self.is_main_residence and self.yearly_rent > 0:
            raise ValueError("a main residence cannot be rented")
        return self

    def is_owned(self, year: int) -> bool:
        if year < self.buying_year:
            return False
        return self.selling_year is None or year < self.selling_year

    def is_sold(self, year: int) -> bool:
        return self.selling_year == year

    def indexed_value(self, year: int, inflation: float) -> float:
        return self.buying_price * (1.0 + inflation) ** (year - self.buying_year)

    def value_at_end_of(self, year: int, inflation: float) -> float:
        if not self.is_owned(year):
            return 0.0
        return self.indexed_value(year, inflation)

    def detention_duration(self, year: int) -> int:
        return year - self.buying_year


class Loan(BaseModel):
    """Amortized loan; `loaned_value` is negative."""

    name: str = Field(..., min_length=1)
    loaned_value: float = Field(..., le=0, description="Principal in €, negative")
    annual_rate_pct: float = Field(..., description="Yearly interest rate %")
    first_year: int
    last_year: int

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_years(self) -> Loan:
        if self.last_year < self.first_year:
            raise ValueError("last_year must not precede first_year")
        return self

    def is_running(self, year: int) -> bool:
        return self.first_year <= year <= self.last_year

    def yearly_payment(self, year: int) -> float:
        """Repayment of `year`, negative while the loan runs."""
        if not self.is_running(year):
            return 0.0
        return loan_payment(
            self.loaned_value,
            pct_to_rate(self.annual_rate_pct),
            self.last_year - self.first_year + 1,
        )

    def value_at_end_of(self, year: int) -> float:
        if not self.is_running(year):
            return 0.0
        return residual_loan_value(
            self.loaned_value,
            pct_to_rate(self.annual_rate_pct),
            self.first_year,
            self.last_year,
            year,
        )


class Debt(BaseModel):
    """Constant debt; `value` is negative."""

    name: str = Field(..., min_length=1)
    value: float = Field(..., le=0)

    model_config = {"frozen": True}

    def value_at_end_of(self, year: int) -> float:
        return self.value


class Patrimoine(BaseModel):
    """Everything the household owns and owes."""

    free_investments: tuple[FreeInvestment, ...] = Field(default=())
    periodic_investments: tuple[PeriodicInvestment, ...] = Field(default=())
    real_estates: tuple[RealEstateAsset, ...] = Field(default=())
    loans: tuple[Loan, ...] = Field(default=())
    debts: tuple[Debt, ...] = Field(default=())

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_unique_names(self) -> Patrimoine:
        assets = [a.name for a in (*self.free_investments, *self.periodic_investments, *self.real_estates)]
        liabilities = [item.name for item in (*self.loans, *self.debts)]
        for names, what in ((assets, "asset"), (liabilities, "liability")):
            if len(names) != len(set(names)):
                raise ValueError(f"{what} names must be unique")
        return self


@dataclass
class FreeInvestmentState:
    """Run-scoped value of a free investment.

    `interest` is the part of `value` made of not yet realized gains.
    """

    investment: FreeInvestment
    value: float
    interest: float

    @classmethod
    def open(cls, investment: FreeInvestment) -> FreeInvestmentState:
        return cls(investment, investment.initial_value, investment.initial_interest)

    @property
    def name(self) -> str:
        return self.investment.name

    def capitalize(self, rate: float) -> float:
        """Add one year of interests; returns the interests earned."""
        earned = self.value * rate
        self.value += earned
        self.interest += earned
        return earned

    def deposit(self, amount: float) -> None:
        if amount < 0:
            raise InvalidParameterError("amount", amount, "deposit must be positive")
        self.value += amount

    def withdraw(self, amount: float) -> tuple[float, float]:
        """Withdraw up to `amount`.

        Returns:
            Tuple of (amount actually withdrawn, realized gain in it)
        """
        if amount < 0:
            raise InvalidParameterError("amount", amount, "withdrawal must be positive")
        taken = min(amount, max(self.value, 0.0))
        if taken == 0.0:
            return 0.0, 0.0
        gain = taken * self.interest / self.value
        self.value -= taken
        self.interest -= gain
        return taken, gain
