"""Tax computations."""

from .rate_grid import RateGrid, find_bracket
from .taxes import (
    CompanyProfitTaxesModel,
    FinancialRevenueTaxesModel,
    FiscalModel,
    Heritage,
    IncomeTaxesModel,
    InheritanceDonationModel,
    IrppSummary,
    IsfModel,
    IsfSummary,
    LifeInsuranceInheritanceModel,
    LifeInsuranceTaxesModel,
    RealEstateCapitalGainIrppModel,
    RealEstateCapitalGainSocialTaxesModel,
)
from .valued_taxes import NamedValueTable, TaxCategory, ValuedTaxes

__all__ = [
    "RateGrid",
    "find_bracket",
    "IncomeTaxesModel",
    "IsfModel",
    "RealEstateCapitalGainIrppModel",
    "RealEstateCapitalGainSocialTaxesModel",
    "FinancialRevenueTaxesModel",
    "CompanyProfitTaxesModel",
    "LifeInsuranceTaxesModel",
    "InheritanceDonationModel",
    "LifeInsuranceInheritanceModel",
    "FiscalModel",
    "IrppSummary",
    "IsfSummary",
    "Heritage",
    "TaxCategory",
    "NamedValueTable",
    "ValuedTaxes",
]
