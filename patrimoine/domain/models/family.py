"""Household data models.

A family is made of adults (who earn work incomes then pensions) and
dependent children, plus its yearly living expenses.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class Salary(BaseModel):
    """Salaried work income."""

    kind: Literal["salary"] = "salary"
    taxable_salary: float = Field(..., description="Yearly taxable salary in €")
    net_salary: float = Field(..., description="Yearly net salary received in €")

    def scaled(self, factor: float) -> Salary:
        return Salary(taxable_salary=self.taxable_salary * factor, net_salary=self.net_salary * factor)


class TurnOver(BaseModel):
    """Non-commercial professional profit (BNC)."""

    kind: Literal["turnover"] = "turnover"
    bnc: float = Field(..., description="Yearly BNC in €")

    def scaled(self, factor: float) -> TurnOver:
        return TurnOver(bnc=self.bnc * factor)


WorkIncome = Annotated[Union[Salary, TurnOver], Field(discriminator="kind")]


def cash_of(work_income: Salary | TurnOver) -> float:
    """Amount actually received from a work income."""
    if isinstance(work_income, Salary):
        return work_income.net_salary
    return work_income.bnc


class Adult(BaseModel):
    """Adult member of the household."""

    name: str = Field(..., min_length=1, description="Unique name in the family")
    birth_year: int
    work_income: Optional[WorkIncome] = Field(default=None, description="Income until retirement")
    retirement_year: Optional[int] = Field(default=None, description="First year without work income")
    pension: float = Field(default=0.0, ge=0, description="Yearly taxable pension in €")
    death_year: Optional[int] = Field(default=None, description="Year of death")

    model_config = {
        "frozen": True,
    }

    def is_alive(self, year: int) -> bool:
        """Alive during `year`; the death year itself no longer counts."""
        return self.death_year is None or year < self.death_year

    def is_retired(self, year: int) -> bool:
        return self.retirement_year is not None and year >= self.retirement_year


class Child(BaseModel):
    """Child of the household."""

    name: str = Field(..., min_length=1)
    birth_year: int
    independence_age: int = Field(default=24, ge=0, description="Age when the child leaves the fiscal home")

    model_config = {
        "frozen": True,
    }

    def is_dependent(self, year: int) -> bool:
        return 0 <= year - self.birth_year < self.independence_age


class Expense(BaseModel):
    """Yearly living expense, indexed on inflation."""

    name: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, description="Yearly amount in € of the first simulated year")
    first_year: Optional[int] = None
    last_year: Optional[int] = None

    model_config = {
        "frozen": True,
    }

    def is_active(self, year: int) -> bool:
        if self.first_year is not None and year < self.first_year:
            return False
        return self.last_year is None or year <= self.last_year


class Family(BaseModel):
    """The household whose patrimoine is simulated."""

    adults: tuple[Adult, ...] = Field(..., min_length=1, max_length=2)
    children: tuple[Child, ...] = Field(default=())
    expenses: tuple[Expense, ...] = Field(default=())

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def check_unique_names(self) -> Family:
        names = [m.name for m in (*self.adults, *self.children)]
        if len(names) != len(set(names)):
            raise ValueError("family members must have unique names")
        return self

    @property
    def member_names(self) -> list[str]:
        return [m.name for m in (*self.adults, *self.children)]

    def adults_alive(self, year: int) -> list[Adult]:
        return [a for a in self.adults if a.is_alive(year)]

    def nb_of_adults_alive(self, year: int) -> int:
        return len(self.adults_alive(year))

    def nb_of_dependent_children(self, year: int) -> int:
        return sum(1 for c in self.children if c.is_dependent(year))

    def deceased_in(self, year: int) -> list[Adult]:
        return [a for a in self.adults if a.death_year == year]
