"""Balance sheet and cash flow time series.

One row of each is appended per simulated year. Rows are frozen, down to
their tables and taxes, and carry a column schema identical for every year.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import pandas as pd

from patrimoine.domain.calculator.valued_taxes import NamedValueTable, ValuedTaxes

YEAR_HEADER = "Année"


@dataclass(frozen=True)
class BalanceSheetLine:
    """Assets and liabilities at the end of a year."""

    year: int
    secured_rate: float
    stock_rate: float
    inflation: float
    assets: NamedValueTable
    liabilities: NamedValueTable
    financial_assets: float

    @property
    def net_assets(self) -> float:
        return self.assets.total + self.liabilities.total

    @property
    def headers(self) -> list[str]:
        return (
            [YEAR_HEADER, "Taux Sûr", "Taux Actions", "Inflation"]
            + self.assets.headers
            + self.liabilities.headers
            + ["ACTIF NET"]
        )

    @property
    def values(self) -> list[float]:
        return (
            [self.year, self.secured_rate, self.stock_rate, self.inflation]
            + self.assets.values
            + self.liabilities.values
            + [self.net_assets]
        )


@dataclass(frozen=True)
class CashFlowLine:
    """Revenues, taxes and expenses of a year."""

    year: int
    revenues: NamedValueTable
    taxes: ValuedTaxes
    expenses: NamedValueTable

    def __post_init__(self):
        object.__setattr__(self, "taxes", self.taxes.freeze())

    @property
    def net_cash_flow(self) -> float:
        return self.revenues.total - self.taxes.total - self.expenses.total

    @property
    def headers(self) -> list[str]:
        return [YEAR_HEADER] + self.revenues.headers + self.taxes.headers + self.expenses.headers + ["SOLDE NET"]

    @property
    def values(self) -> list[float]:
        return [self.year] + self.revenues.values + self.taxes.values + self.expenses.values + [self.net_cash_flow]


def lines_frame(lines: Sequence[BalanceSheetLine] | Sequence[CashFlowLine]) -> pd.DataFrame:
    """One column per header, one row per year."""
    if not lines:
        return pd.DataFrame()
    return pd.DataFrame([line.values for line in lines], columns=lines[0].headers)


@dataclass
class SocialAccounts:
    """Run-scoped accumulation of the yearly rows."""

    balance_sheet: list[BalanceSheetLine] = field(default_factory=list)
    cash_flow: list[CashFlowLine] = field(default_factory=list)

    def reset(self) -> None:
        self.balance_sheet.clear()
        self.cash_flow.clear()

    def append(self, balance_sheet_line: BalanceSheetLine, cash_flow_line: CashFlowLine) -> None:
        if balance_sheet_line.year != cash_flow_line.year:
            raise ValueError("balance sheet and cash flow rows must share the same year")
        if self.balance_sheet and balance_sheet_line.headers != self.balance_sheet[0].headers:
            raise ValueError(f"balance sheet columns changed in {balance_sheet_line.year}")
        if self.cash_flow and cash_flow_line.headers != self.cash_flow[0].headers:
            raise ValueError(f"cash flow columns changed in {cash_flow_line.year}")
        self.balance_sheet.append(balance_sheet_line)
        self.cash_flow.append(cash_flow_line)

    @property
    def first_year(self) -> Optional[int]:
        return self.balance_sheet[0].year if self.balance_sheet else None

    @property
    def last_year(self) -> Optional[int]:
        return self.balance_sheet[-1].year if self.balance_sheet else None

    def balance_sheet_frame(self) -> pd.DataFrame:
        return lines_frame(self.balance_sheet)

    def cash_flow_frame(self) -> pd.DataFrame:
        return lines_frame(self.cash_flow)
