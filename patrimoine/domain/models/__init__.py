"""Domain models: fiscal configuration, household and patrimoine."""

from .family import Adult, Child, Expense, Family, Salary, TurnOver, WorkIncome, cash_of
from .fiscal import (
    CompanyProfitTaxesConfig,
    ExonerationSlice,
    FinancialRevenueTaxesConfig,
    FiscalConfig,
    IncomeTaxesConfig,
    InheritanceDonationConfig,
    IsfConfig,
    LifeInsuranceInheritanceConfig,
    LifeInsuranceTaxesConfig,
    RateSlice,
    RealEstateCapitalGainIrppConfig,
    RealEstateCapitalGainSocialConfig,
    Version,
)
from .patrimoine import (
    ContractualRate,
    Debt,
    EnvelopeKind,
    FreeInvestment,
    FreeInvestmentState,
    LifeInsurance,
    LifeInsuranceClause,
    Loan,
    MarketRate,
    Patrimoine,
    Pea,
    PeriodicInvestment,
    PlainAccount,
    RealEstateAsset,
    RentalRegime,
)

__all__ = [
    # Family
    "Adult",
    "Child",
    "Expense",
    "Family",
    "Salary",
    "TurnOver",
    "WorkIncome",
    "cash_of",
    # Fiscal configuration
    "Version",
    "RateSlice",
    "ExonerationSlice",
    "IncomeTaxesConfig",
    "IsfConfig",
    "RealEstateCapitalGainIrppConfig",
    "RealEstateCapitalGainSocialConfig",
    "FinancialRevenueTaxesConfig",
    "CompanyProfitTaxesConfig",
    "LifeInsuranceTaxesConfig",
    "InheritanceDonationConfig",
    "LifeInsuranceInheritanceConfig",
    "FiscalConfig",
    # Patrimoine
    "EnvelopeKind",
    "PlainAccount",
    "Pea",
    "LifeInsurance",
    "LifeInsuranceClause",
    "ContractualRate",
    "MarketRate",
    "FreeInvestment",
    "FreeInvestmentState",
    "PeriodicInvestment",
    "RealEstateAsset",
    "RentalRegime",
    "Loan",
    "Debt",
    "Patrimoine",
]
