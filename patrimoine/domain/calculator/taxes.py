"""Tax models.

Each model wraps its immutable configuration. Configuration values are in
percent; the rates returned in summaries are fractional.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Sequence, TypeVar, Union

from pydantic import BaseModel, ValidationError

from patrimoine.core.exceptions import ConfigurationError, InvalidParameterError
from patrimoine.core.financial import pct_to_rate
from patrimoine.domain.calculator.rate_grid import RateGrid, find_bracket
from patrimoine.domain.models.family import Salary, TurnOver
from patrimoine.domain.models.fiscal import (
    CompanyProfitTaxesConfig,
    ExonerationSlice,
    FinancialRevenueTaxesConfig,
    FiscalConfig,
    IncomeTaxesConfig,
    InheritanceDonationConfig,
    IsfConfig,
    LifeInsuranceInheritanceConfig,
    LifeInsuranceTaxesConfig,
    RealEstateCapitalGainIrppConfig,
    RealEstateCapitalGainSocialConfig,
)

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def build_config(config_cls: type[ConfigT], config: Union[ConfigT, Mapping[str, Any]], component: str) -> ConfigT:
    """Validate a configuration given as a model or as decoded JSON."""
    if isinstance(config, config_cls):
        return config
    try:
        return config_cls.model_validate(config)
    except ValidationError as e:
        raise ConfigurationError(component, str(e)) from e


class IrppSummary(NamedTuple):
    amount: float
    family_quotient: float
    marginal_rate: float
    average_rate: float


class IsfSummary(NamedTuple):
    amount: float
    taxable: float
    marginal_rate: float


class Heritage(NamedTuple):
    net_amount: float
    tax: float


def exoneration_discount(grid: Sequence[ExonerationSlice], detention_duration: int) -> float:
    """Discount % earned after `detention_duration` years, clamped to 100."""
    index = find_bracket([s.floor for s in grid], detention_duration)
    if index is None:
        return 0.0
    s = grid[index]
    return min(s.prev_discount + s.discount_rate * (detention_duration - s.floor), 100.0)


class IncomeTaxesModel:
    """Progressive income tax (IRPP) with family quotient."""

    def __init__(self, config: Union[IncomeTaxesConfig, Mapping[str, Any]]):
        self.config = build_config(IncomeTaxesConfig, config, "income_taxes")
        self.grid = RateGrid(self.config.grid)

    def family_quotient(self, nb_adults: int, nb_children: int) -> float:
        """Number of shares: half a share per child for the first two, then one."""
        if nb_adults < 0:
            raise InvalidParameterError("nb_adults", nb_adults, "must be >= 0")
        if nb_children < 0:
            raise InvalidParameterError("nb_children", nb_children, "must be >= 0")
        if nb_children <= 2:
            return nb_adults + nb_children / 2.0
        return nb_adults + 1.0 + (nb_children - 2)

    def taxable_income(self, work_income: Union[Salary, TurnOver]) -> float:
        """Taxable part of a work income, after the flat rebate."""
        cfg = self.config
        if isinstance(work_income, Salary):
            taxable = work_income.taxable_salary
            rebate = min(max(taxable * pct_to_rate(cfg.salary_rebate), cfg.min_salary_rebate), cfg.max_salary_rebate)
        else:
            taxable = work_income.bnc
            rebate = max(taxable * pct_to_rate(cfg.turnover_rebate), cfg.min_turnover_rebate)
        return max(0.0, taxable - rebate)

    def _tax(self, taxable_income: float, quotient: float) -> float:
        if quotient <= 0:
            return 0.0
        return quotient * self.grid.tax(taxable_income / quotient)

    def irpp(self, taxable_income: float, nb_adults: int, nb_children: int) -> IrppSummary:
        """Income tax of the household.

        The benefit of the children's shares is capped at `child_rebate` per
        half share.
        """
        fq = self.family_quotient(nb_adults, nb_children)
        fq_without_children = self.family_quotient(nb_adults, 0)
        if taxable_income <= 0 or fq <= 0:
            return IrppSummary(0.0, fq, 0.0, 0.0)

        with_children = self._tax(taxable_income, fq)
        without_children = self._tax(taxable_income, fq_without_children)
        max_gain = (fq - fq_without_children) * 2.0 * self.config.child_rebate
        if without_children - with_children > max_gain:
            amount = without_children - max_gain
        else:
            amount = with_children

        return IrppSummary(
            amount=amount,
            family_quotient=fq,
            marginal_rate=self.grid.marginal_rate(taxable_income / fq),
            average_rate=amount / taxable_income,
        )


class IsfModel:
    """Wealth tax on net taxable real estate."""

    def __init__(self, config: Union[IsfConfig, Mapping[str, Any]]):
        self.config = build_config(IsfConfig, config, "isf")
        self.grid = RateGrid(self.config.grid)

    def isf(self, taxable_asset: float) -> IsfSummary:
        cfg = self.config
        if taxable_asset <= cfg.threshold:
            return IsfSummary(0.0, taxable_asset, 0.0)

        amount = self.grid.tax(taxable_asset)
        # décote between the threshold and the end of the décote zone
        decote = max(cfg.decote_amount - taxable_asset * pct_to_rate(cfg.decote_coef), 0.0)
        return IsfSummary(
            amount=max(amount - decote, 0.0),
            taxable=taxable_asset,
            marginal_rate=self.grid.marginal_rate(taxable_asset),
        )

    def taxable_value(self, value: float, is_main_residence: bool, is_rented: bool = False) -> float:
        """Value of an estate retained in the taxable asset.

        The main residence and rented estates are discounted.
        """
        if is_main_residence:
            return value * (1.0 - pct_to_rate(self.config.decote_residence))
        if is_rented:
            return value * (1.0 - pct_to_rate(self.config.decote_location))
        return value


class RealEstateCapitalGainIrppModel:
    """Income tax on real-estate capital gains."""

    def __init__(self, config: Union[RealEstateCapitalGainIrppConfig, Mapping[str, Any]]):
        self.config = build_config(RealEstateCapitalGainIrppConfig, config, "real_estate_capital_gain_irpp")

    def discount(self, detention_duration: int) -> float:
        """Duration discount in %."""
        return exoneration_discount(self.config.exo_grid, detention_duration)

    def irpp(self, capital_gain: float, detention_duration: int) -> float:
        if capital_gain <= 0:
            return 0.0
        cfg = self.config
        travaux = cfg.discount_travaux if detention_duration >= cfg.discount_after else 0.0
        return (
            capital_gain
            * (1.0 - pct_to_rate(travaux))
            * (1.0 - pct_to_rate(self.discount(detention_duration)))
            * pct_to_rate(cfg.irpp_rate)
        )


class RealEstateCapitalGainSocialTaxesModel:
    """Social levies on real-estate capital gains."""

    def __init__(self, config: Union[RealEstateCapitalGainSocialConfig, Mapping[str, Any]]):
        self.config = build_config(RealEstateCapitalGainSocialConfig, config, "real_estate_capital_gain_social")

    def discount(self, detention_duration: int) -> float:
        return exoneration_discount(self.config.exo_grid, detention_duration)

    def social_taxes(self, capital_gain: float, detention_duration: int) -> float:
        if capital_gain <= 0:
            return 0.0
        cfg = self.config
        travaux = cfg.discount_travaux if detention_duration >= cfg.discount_after else 0.0
        return (
            capital_gain
            * (1.0 - pct_to_rate(travaux))
            * (1.0 - pct_to_rate(self.discount(detention_duration)))
            * pct_to_rate(cfg.total)
        )


class FinancialRevenueTaxesModel:
    """Social levies on financial revenues."""

    def __init__(self, config: Union[FinancialRevenueTaxesConfig, Mapping[str, Any]]):
        self.config = build_config(FinancialRevenueTaxesConfig, config, "financial_revenue_taxes")

    @property
    def rate(self) -> float:
        return pct_to_rate(self.config.total)

    def social_taxes(self, brut: float) -> float:
        return brut * self.rate

    def net(self, brut: float) -> float:
        return brut - self.social_taxes(brut)

    def brut(self, net: float) -> float:
        """Gross revenue yielding `net` after levies."""
        return net / (1.0 - self.rate)


class CompanyProfitTaxesModel:
    """Corporate profit tax (IS)."""

    def __init__(self, config: Union[CompanyProfitTaxesConfig, Mapping[str, Any]]):
        self.config = build_config(CompanyProfitTaxesConfig, config, "company_profit_taxes")

    def tax(self, gross_profit: float) -> float:
        if gross_profit < 0:
            return 0.0
        return gross_profit * pct_to_rate(self.config.rate)

    def net(self, gross_profit: float) -> float:
        if gross_profit < 0:
            return 0.0
        return gross_profit - self.tax(gross_profit)


class LifeInsuranceTaxesModel:
    def __init__(self, config: Union[LifeInsuranceTaxesConfig, Mapping[str, Any]]):
        self.config = build_config(LifeInsuranceTaxesConfig, config, "life_insurance_taxes")

    @property
    def rebate_per_person(self) -> float:
        return self.config.rebate_per_person


class InheritanceDonationModel:
    """Inheritance tax in direct line."""

    def __init__(self, config: Union[InheritanceDonationConfig, Mapping[str, Any]]):
        self.config = build_config(InheritanceDonationConfig, config, "inheritance_donation")
        self.grid = RateGrid(self.config.grid_ligne_directe)

    def heritage_of_child(self, share: float) -> Heritage:
        taxable = max(0.0, share - self.config.abat_ligne_directe)
        tax = self.grid.tax(taxable)
        return Heritage(net_amount=share - tax, tax=tax)

    @staticmethod
    def legal_shares(nb_children: int, has_spouse: bool) -> tuple[float, float]:
        """Fractions of the estate going to the spouse and to each child.

        With a surviving spouse and children, the spouse receives the
        quotité disponible 1 / (n + 1).
        """
        if nb_children == 0:
            return (1.0 if has_spouse else 0.0), 0.0
        if not has_spouse:
            return 0.0, 1.0 / nb_children
        spouse_share = 1.0 / (nb_children + 1)
        return spouse_share, (1.0 - spouse_share) / nb_children


class LifeInsuranceInheritanceModel:
    """Transfer tax on life-insurance capital."""

    def __init__(self, config: Union[LifeInsuranceInheritanceConfig, Mapping[str, Any]]):
        self.config = build_config(LifeInsuranceInheritanceConfig, config, "life_insurance_inheritance")
        self.grid = RateGrid(self.config.grid)

    def heritage_to_child(self, share: float) -> Heritage:
        tax = self.grid.tax(share)
        return Heritage(net_amount=share - tax, tax=tax)

    def heritage_to_spouse(self, share: float) -> Heritage:
        return Heritage(net_amount=share, tax=0.0)


@dataclass(frozen=True)
class FiscalModel:
    """All tax models of a fiscal configuration."""

    income_taxes: IncomeTaxesModel
    isf: IsfModel
    real_estate_capital_gain_irpp: RealEstateCapitalGainIrppModel
    real_estate_capital_gain_social: RealEstateCapitalGainSocialTaxesModel
    financial_revenue_taxes: FinancialRevenueTaxesModel
    company_profit_taxes: CompanyProfitTaxesModel
    life_insurance_taxes: LifeInsuranceTaxesModel
    inheritance_donation: InheritanceDonationModel
    life_insurance_inheritance: LifeInsuranceInheritanceModel

    @classmethod
    def from_config(cls, config: Union[FiscalConfig, Mapping[str, Any]]) -> FiscalModel:
        cfg = build_config(FiscalConfig, config, "fiscal_model")
        return cls(
            income_taxes=IncomeTaxesModel(cfg.income_taxes),
            isf=IsfModel(cfg.isf),
            real_estate_capital_gain_irpp=RealEstateCapitalGainIrppModel(cfg.real_estate_capital_gain_irpp),
            real_estate_capital_gain_social=RealEstateCapitalGainSocialTaxesModel(cfg.real_estate_capital_gain_social),
            financial_revenue_taxes=FinancialRevenueTaxesModel(cfg.financial_revenue_taxes),
            company_profit_taxes=CompanyProfitTaxesModel(cfg.company_profit_taxes),
            life_insurance_taxes=LifeInsuranceTaxesModel(cfg.life_insurance_taxes),
            inheritance_donation=InheritanceDonationModel(cfg.inheritance_donation),
            life_insurance_inheritance=LifeInsuranceInheritanceModel(cfg.life_insurance_inheritance),
        )
