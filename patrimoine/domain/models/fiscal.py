"""Versioned fiscal model configuration.

Each tax model is parameterized by an immutable configuration decoded from
JSON. Rates and discounts are expressed in percent (19.0 for 19%), amounts in €.
Validation happens once, when the configuration is built.
"""

from __future__ import annotations

import datetime as dt
from typing import Sequence

from pydantic import BaseModel, Field, field_validator, model_validator


class FrozenConfig(BaseModel):
    """Base class of immutable configuration objects."""

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


class Version(FrozenConfig):
    """Version record attached to every fiscal model."""

    name: str = Field(default="", description="Model name")
    version: str = Field(..., pattern=r"^\d+\.\d+(\.\d+)?$", description="major.minor[.patch]")
    date: dt.date = Field(..., description="Effective date")
    comment: str = Field(default="", description="Free text")


def _check_ascending(floors: Sequence[float], what: str) -> None:
    for previous, current in zip(floors, floors[1:]):
        if current <= previous:
            raise ValueError(f"{what} floors must be strictly increasing ({previous} >= {current})")


class RateSlice(FrozenConfig):
    """Bracket of a progressive grid."""

    floor: float = Field(..., ge=0, description="Lower bound in €")
    rate: float = Field(..., ge=0, le=100, description="Marginal rate %")


class ExonerationSlice(FrozenConfig):
    """Duration-indexed discount of a real-estate capital gain."""

    floor: int = Field(..., ge=0, description="Holding duration in years")
    discount_rate: float = Field(..., ge=0, description="% per year held beyond floor")
    prev_discount: float = Field(..., ge=0, le=100, description="% cumulated below floor")


def _check_levies_total(config):
    if config.crds + config.csg + config.prelev_social >= 100:
        raise ValueError("crds + csg + prelev_social must stay below 100%")
    return config


def _rate_grid(grid: tuple[RateSlice, ...]) -> tuple[RateSlice, ...]:
    _check_ascending([s.floor for s in grid], "Rate grid")
    return grid


def _exoneration_grid(grid: tuple[ExonerationSlice, ...]) -> tuple[ExonerationSlice, ...]:
    _check_ascending([s.floor for s in grid], "Exoneration grid")
    return grid


class IncomeTaxesConfig(FrozenConfig):
    """Progressive income tax (IRPP)."""

    version: Version
    grid: tuple[RateSlice, ...] = Field(..., min_length=1)
    turnover_rebate: float = Field(..., ge=0, le=100, description="BNC rebate %")
    min_turnover_rebate: float = Field(..., ge=0, description="Minimum BNC rebate in €")
    salary_rebate: float = Field(..., ge=0, le=100, description="Salary rebate %")
    min_salary_rebate: float = Field(..., ge=0, description="Minimum salary rebate in €")
    max_salary_rebate: float = Field(..., ge=0, description="Maximum salary rebate in €")
    child_rebate: float = Field(..., ge=0, description="Cap of the gain per child half-share in €")

    @field_validator("grid")
    @classmethod
    def check_grid(cls, value):
        return _rate_grid(value)

    @model_validator(mode="after")
    def check_salary_rebate_bounds(self) -> IncomeTaxesConfig:
        if self.min_salary_rebate > self.max_salary_rebate:
            raise ValueError("min_salary_rebate must not exceed max_salary_rebate")
        return self


class IsfConfig(FrozenConfig):
    """Wealth tax on real estate (ISF / IFI)."""

    version: Version
    grid: tuple[RateSlice, ...] = Field(..., min_length=1)
    threshold: float = Field(..., ge=0, description="Taxation threshold in €")
    decote_amount: float = Field(..., ge=0, description="Décote constant in €")
    decote_coef: float = Field(..., ge=0, le=100, description="Décote coefficient %")
    decote_residence: float = Field(..., ge=0, le=100, description="Main residence discount %")
    decote_location: float = Field(default=0.0, ge=0, le=100, description="Rented estate discount %")

    @field_validator("grid")
    @classmethod
    def check_grid(cls, value):
        return _rate_grid(value)


class RealEstateCapitalGainIrppConfig(FrozenConfig):
    """Income tax on real-estate capital gains."""

    version: Version
    exo_grid: tuple[ExonerationSlice, ...] = Field(default=())
    irpp_rate: float = Field(..., ge=0, le=100, description="Flat rate %")
    discount_travaux: float = Field(..., ge=0, le=100, description="Flat works discount %")
    discount_after: int = Field(..., ge=0, description="Years of detention enabling the works discount")

    @field_validator("exo_grid")
    @classmethod
    def check_exo_grid(cls, value):
        return _exoneration_grid(value)


class RealEstateCapitalGainSocialConfig(FrozenConfig):
    """Social levies on real-estate capital gains."""

    version: Version
    exo_grid: tuple[ExonerationSlice, ...] = Field(default=())
    discount_travaux: float = Field(..., ge=0, le=100, description="Flat works discount %")
    discount_after: int = Field(..., ge=0, description="Years of detention enabling the works discount")
    crds: float = Field(..., ge=0, le=100, description="%")
    csg: float = Field(..., ge=0, le=100, description="%")
    prelev_social: float = Field(..., ge=0, le=100, description="%")

    @field_validator("exo_grid")
    @classmethod
    def check_exo_grid(cls, value):
        return _exoneration_grid(value)

    @model_validator(mode="after")
    def check_total(self):
        return _check_levies_total(self)

    @property
    def total(self) -> float:
        """Overall social levies rate %."""
        return self.crds + self.csg + self.prelev_social


class FinancialRevenueTaxesConfig(FrozenConfig):
    """Social levies on financial revenues (interests, rents, gains)."""

    version: Version
    crds: float = Field(..., ge=0, le=100, description="%")
    csg: float = Field(..., ge=0, le=100, description="%")
    prelev_social: float = Field(..., ge=0, le=100, description="%")

    @model_validator(mode="after")
    def check_total(self):
        return _check_levies_total(self)

    @property
    def total(self) -> float:
        """Overall social levies rate %."""
        return self.crds + self.csg + self.prelev_social


class CompanyProfitTaxesConfig(FrozenConfig):
    """Corporate profit tax (IS)."""

    version: Version
    rate: float = Field(..., ge=0, le=100, description="%")


class LifeInsuranceTaxesConfig(FrozenConfig):
    """Taxation of life-insurance gains."""

    version: Version
    rebate_per_person: float = Field(..., ge=0, description="Yearly rebate on gains per person in €")


class InheritanceDonationConfig(FrozenConfig):
    """Inheritance tax in direct line."""

    version: Version
    grid_ligne_directe: tuple[RateSlice, ...] = Field(..., min_length=1)
    abat_ligne_directe: float = Field(..., ge=0, description="Allowance per child in €")

    @field_validator("grid_ligne_directe")
    @classmethod
    def check_grid_ligne_directe(cls, value):
        return _rate_grid(value)


class LifeInsuranceInheritanceConfig(FrozenConfig):
    """Transfer tax on life-insurance capital paid to beneficiaries."""

    version: Version
    grid: tuple[RateSlice, ...] = Field(..., min_length=1)

    @field_validator("grid")
    @classmethod
    def check_grid(cls, value):
        return _rate_grid(value)


class FiscalConfig(FrozenConfig):
    """Complete set of fiscal model configurations.

    The sub-models are versioned independently.
    """

    income_taxes: IncomeTaxesConfig
    isf: IsfConfig
    real_estate_capital_gain_irpp: RealEstateCapitalGainIrppConfig
    real_estate_capital_gain_social: RealEstateCapitalGainSocialConfig
    financial_revenue_taxes: FinancialRevenueTaxesConfig
    company_profit_taxes: CompanyProfitTaxesConfig
    life_insurance_taxes: LifeInsuranceTaxesConfig
    inheritance_donation: InheritanceDonationConfig
    life_insurance_inheritance: LifeInsuranceInheritanceConfig
