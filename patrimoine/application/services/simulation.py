"""Year-by-year projection of the household patrimoine.

The driver composes the economy provider, the financial math and the tax
models. It is the only component holding run-scoped mutable state, and the
single point where a failing year aborts the run.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

import pandas as pd

from patrimoine.application.services.economy import EconomyModelProvider, RatePair, SimulationMode
from patrimoine.application.services.social_accounts import (
    BalanceSheetLine,
    CashFlowLine,
    SocialAccounts,
    lines_frame,
)
from patrimoine.core.exceptions import (
    InsufficientFundsError,
    InvalidParameterError,
    NotComputedError,
    SimulationCancelledError,
    SimulationError,
)
from patrimoine.core.logging import get_logger
from patrimoine.domain.calculator.taxes import FiscalModel, InheritanceDonationModel, IrppSummary
from patrimoine.domain.calculator.valued_taxes import NamedValueTable, TaxCategory, ValuedTaxes
from patrimoine.domain.models.family import Adult, Family, Salary, cash_of
from patrimoine.domain.models.patrimoine import (
    EnvelopeKind,
    FreeInvestment,
    FreeInvestmentState,
    Patrimoine,
    PeriodicInvestment,
    RentalRegime,
)

log = get_logger(__name__)

CASH_ACCOUNT = "Liquidités"

ProgressCallback = Callable[[int, int, int], None]


class CancelEvent(Protocol):
    def is_set(self) -> bool:
        ...


class Exporter(Protocol):
    def export(self, result: SimulationResult, title: str) -> Path:
        ...


@dataclass(frozen=True)
class SimulationResult:
    """Immutable outcome of a successful run."""

    title: str
    mode: SimulationMode
    first_year: int
    last_year: int
    taxes: ValuedTaxes
    balance_sheet: tuple[BalanceSheetLine, ...]
    cash_flow: tuple[CashFlowLine, ...]
    # None when no adult dies during the run
    net_assets_at_first_death: Optional[float] = None
    net_assets_at_second_death: Optional[float] = None

    @property
    def final_net_assets(self) -> float:
        return self.balance_sheet[-1].net_assets

    @property
    def min_financial_assets(self) -> float:
        return min(line.financial_assets for line in self.balance_sheet)

    def balance_sheet_frame(self) -> pd.DataFrame:
        return lines_frame(self.balance_sheet)

    def cash_flow_frame(self) -> pd.DataFrame:
        return lines_frame(self.cash_flow)


@dataclass
class _RunState:
    """Mutable bookkeeping of one run."""

    free: list[FreeInvestmentState]
    # surplus kept uninvested when there is no free investment
    cash: float = 0.0
    # realized gains taxed in the current year
    taxable_gains: float = 0.0
    social_gains: float = 0.0
    # realized gains of the current year, taxed next year
    next_taxable_gains: float = 0.0
    next_social_gains: float = 0.0

    @classmethod
    def open(cls, patrimoine: Patrimoine) -> _RunState:
        return cls(free=[FreeInvestmentState.open(inv) for inv in patrimoine.free_investments])

    def realize(self, item: Union[FreeInvestment, PeriodicInvestment], gain: float, rebate_per_person: float) -> None:
        """Record a realized gain for next year's taxation."""
        if gain <= 0:
            return
        kind = item.envelope.kind()
        self.next_social_gains += gain
        if kind is EnvelopeKind.PEA:
            return
        if kind is EnvelopeKind.LIFE_INSURANCE:
            fractions = item.owners.values() if item.owners else [1.0]
            self.next_taxable_gains += sum(max(0.0, gain * f - rebate_per_person) for f in fractions)
        else:
            self.next_taxable_gains += gain

    def roll(self) -> None:
        self.taxable_gains, self.next_taxable_gains = self.next_taxable_gains, 0.0
        self.social_gains, self.next_social_gains = self.next_social_gains, 0.0


class Simulation:
    """Projection driver: `idle` until `compute` succeeds, then `computed`."""

    def __init__(
        self,
        fiscal_model: FiscalModel,
        economy: EconomyModelProvider,
        mode: SimulationMode = SimulationMode.DETERMINISTIC,
        exporter: Optional[Exporter] = None,
        title: str = "Simulation",
    ):
        self.fiscal_model = fiscal_model
        self.economy = economy
        self.mode = mode
        self.exporter = exporter
        self.title = title

        self.accounts = SocialAccounts()
        self.taxes = ValuedTaxes()
        self.first_year: Optional[int] = None
        self.last_year: Optional[int] = None
        self.computed = False
        self.saved = False
        self._result: Optional[SimulationResult] = None
        self._component = ""

    def reset(self) -> None:
        """Back to `idle`. Idempotent."""
        self.accounts.reset()
        self.taxes = ValuedTaxes()
        self.first_year = None
        self.last_year = None
        self.computed = False
        self.saved = False
        self._result = None
        self._component = ""

    def compute(
        self,
        nb_of_years: int,
        family: Family,
        patrimoine: Patrimoine,
        first_year: Optional[int] = None,
        cancel_event: Optional[CancelEvent] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> SimulationResult:
        """Run the projection over `nb_of_years` years.

        Args:
            nb_of_years: Number of simulated years (>= 1)
            family: The household
            patrimoine: Its assets and liabilities
            first_year: First simulated year, the current year by default
            cancel_event: Checked before each year (e.g. threading.Event)
            progress: Called after each year with (year, first_year, last_year)

        Returns:
            The immutable result of the run

        Raises:
            SimulationError: a year failed; rows computed so far are kept
            SimulationCancelledError: cancel_event was set
        """
        if nb_of_years < 1:
            raise InvalidParameterError("nb_of_years", nb_of_years, "must be >= 1")

        self.reset()
        self.first_year = first_year if first_year is not None else dt.date.today().year
        self.last_year = self.first_year + nb_of_years - 1
        run = _RunState.open(patrimoine)
        net_assets_at_death: list[float] = []

        for year in range(self.first_year, self.last_year + 1):
            if cancel_event is not None and cancel_event.is_set():
                log.warning("simulation_cancelled", title=self.title, year=year)
                raise SimulationCancelledError(year)

            try:
                balance_sheet_line, cash_flow_line = self._simulate_year(year, family, patrimoine, run)
                self._component = "social_accounts"
                self.accounts.append(balance_sheet_line, cash_flow_line)
            except Exception as e:
                log.error(
                    "simulation_aborted",
                    title=self.title,
                    year=year,
                    component=self._component,
                    error=str(e),
                )
                raise SimulationError(self._component, year, str(e)) from e

            self.taxes = cash_flow_line.taxes
            # one entry per adult deceased during the year
            net_assets_at_death += [balance_sheet_line.net_assets] * len(family.deceased_in(year))
            run.roll()
            if progress is not None:
                progress(year, self.first_year, self.last_year)

        self._result = SimulationResult(
            title=self.title,
            mode=self.mode,
            first_year=self.first_year,
            last_year=self.last_year,
            taxes=self.taxes,
            balance_sheet=tuple(self.accounts.balance_sheet),
            cash_flow=tuple(self.accounts.cash_flow),
            net_assets_at_first_death=net_assets_at_death[0] if net_assets_at_death else None,
            net_assets_at_second_death=net_assets_at_death[1] if len(net_assets_at_death) > 1 else None,
        )
        self.computed = True
        self.saved = False
        log.info(
            "simulation_computed",
            title=self.title,
            mode=self.mode.name,
            first_year=self.first_year,
            last_year=self.last_year,
            final_net_assets=round(self._result.final_net_assets, 2),
        )
        return self._result

    @property
    def result(self) -> SimulationResult:
        if not self.computed or self._result is None:
            raise NotComputedError("no successful computation to report")
        return self._result

    def save(self) -> Path:
        """Export the time series through the exporter."""
        result = self.result
        if self.exporter is None:
            from patrimoine.core.settings import get_settings
            from patrimoine.services.exporter import CsvExporter

            self.exporter = CsvExporter(get_settings().export_dir)
        path = self.exporter.export(result, self.title)
        self.saved = True
        return path

    # --- one year ---

    def _simulate_year(
        self,
        year: int,
        family: Family,
        patrimoine: Patrimoine,
        run: _RunState,
    ) -> tuple[BalanceSheetLine, CashFlowLine]:
        fm = self.fiscal_model
        self._component = "economy"
        rates = self.economy.rates(year, self.mode)
        inflation = self.economy.inflation(self.mode)
        index = (1.0 + inflation) ** (year - self.first_year)

        self._component = "free_investments"
        for state in run.free:
            state.capitalize(state.investment.interest_rate_type.rate(*rates))

        taxes = ValuedTaxes()
        revenues: list[tuple[str, float]] = []
        expenses: list[tuple[str, float]] = []

        # 1. revenues
        self._component = "revenues"
        taxable_income = 0.0
        for adult in family.adults:
            work, pension, taxable = self._adult_income(adult, year, index)
            revenues.append((f"Travail {adult.name}", work))
            revenues.append((f"Pension {adult.name}", pension))
            taxable_income += taxable

        direct_rents = 0.0
        for estate in patrimoine.real_estates:
            rent = estate.yearly_rent * index if estate.is_owned(year) else 0.0
            if estate.rental_regime is RentalRegime.COMPANY:
                revenues.append((f"SCI {estate.name}", fm.company_profit_taxes.net(rent)))
            else:
                revenues.append((f"Loyers {estate.name}", rent))
                direct_rents += rent
            sale = estate.indexed_value(year, inflation) if estate.is_sold(year) else 0.0
            revenues.append((f"Vente {estate.name}", sale))

        for periodic in patrimoine.periodic_investments:
            proceeds = 0.0
            if year == periodic.last_year:
                rate = periodic.interest_rate_type.rate(*rates)
                proceeds = periodic.capitalized_value(year, rate)
                run.realize(
                    periodic,
                    periodic.cumulated_interests(year, rate),
                    fm.life_insurance_taxes.rebate_per_person,
                )
            revenues.append((f"Liquidation {periodic.name}", proceeds))

        # 2. taxes
        self._component = "income_taxes"
        taxable_income += direct_rents + run.taxable_gains
        nb_of_adults = family.nb_of_adults_alive(year)
        if nb_of_adults > 0:
            irpp = fm.income_taxes.irpp(taxable_income, nb_of_adults, family.nb_of_dependent_children(year))
        else:
            irpp = IrppSummary(0.0, 0.0, 0.0, 0.0)
        taxes.irpp = irpp
        taxes.add(TaxCategory.IRPP, "Revenus", irpp.amount)

        self._component = "real_estate_capital_gain"
        capital_gain_irpp = capital_gain_social = 0.0
        for estate in patrimoine.real_estates:
            if estate.is_sold(year) and not estate.is_main_residence:
                gain = estate.indexed_value(year, inflation) - estate.buying_price
                duration = estate.detention_duration(year)
                capital_gain_irpp += fm.real_estate_capital_gain_irpp.irpp(gain, duration)
                capital_gain_social += fm.real_estate_capital_gain_social.social_taxes(gain, duration)
        taxes.add(TaxCategory.IRPP, "Plus-values immobilières", capital_gain_irpp)

        self._component = "social_taxes"
        revenue_taxes = fm.financial_revenue_taxes
        taxes.add(TaxCategory.SOCIAL_TAXES, "Loyers", revenue_taxes.social_taxes(direct_rents))
        taxes.add(TaxCategory.SOCIAL_TAXES, "Plus-values financières", revenue_taxes.social_taxes(run.social_gains))
        taxes.add(TaxCategory.SOCIAL_TAXES, "Plus-values immobilières", capital_gain_social)

        self._component = "isf"
        taxable_asset = sum(
            fm.isf.taxable_value(
                estate.value_at_end_of(year, inflation),
                estate.is_main_residence,
                is_rented=estate.yearly_rent > 0 and estate.is_owned(year),
            )
            for estate in patrimoine.real_estates
        )
        taxable_asset += sum(loan.value_at_end_of(year) for loan in patrimoine.loans)
        isf = fm.isf.isf(max(0.0, taxable_asset))
        taxes.isf = isf
        taxes.add(TaxCategory.ISF, "ISF", isf.amount)

        self._component = "local_taxes"
        for estate in patrimoine.real_estates:
            local = estate.yearly_local_taxes * index if estate.is_owned(year) else 0.0
            taxes.add(TaxCategory.LOCAL_TAXES, estate.name, local)

        self._component = "succession"
        legal_tax, life_insurance_tax = self._succession_taxes(year, family, patrimoine, run, rates, inflation)
        taxes.add(TaxCategory.SUCCESSION, "Succession", legal_tax)
        taxes.add(TaxCategory.SUCCESSION, "Assurance vie", life_insurance_tax)

        # 3. expenses
        self._component = "expenses"
        for expense in family.expenses:
            expenses.append((expense.name, expense.amount * index if expense.is_active(year) else 0.0))
        for loan in patrimoine.loans:
            expenses.append((f"Remboursement {loan.name}", -loan.yearly_payment(year)))
        for periodic in patrimoine.periodic_investments:
            expenses.append((f"Versement {periodic.name}", periodic.payment(year)))

        cash_flow_line = CashFlowLine(
            year=year,
            revenues=NamedValueTable("REVENUS", revenues),
            taxes=taxes,
            expenses=NamedValueTable("DEPENSES", expenses),
        )

        # 4. net cash flow into or out of the free investments
        self._component = "free_investments"
        self._invest(cash_flow_line.net_cash_flow, year, run)

        self._component = "balance_sheet"
        return self._balance_sheet_line(year, patrimoine, run, rates, inflation), cash_flow_line

    def _adult_income(self, adult: Adult, year: int, index: float) -> tuple[float, float, float]:
        """Work income, pension and taxable income of an adult."""
        if not adult.is_alive(year):
            return 0.0, 0.0, 0.0
        income_taxes = self.fiscal_model.income_taxes
        if adult.is_retired(year):
            pension = adult.pension * index
            taxable = income_taxes.taxable_income(Salary(taxable_salary=pension, net_salary=pension))
            return 0.0, pension, taxable
        if adult.work_income is None:
            return 0.0, 0.0, 0.0
        work_income = adult.work_income.scaled(index)
        return cash_of(work_income), 0.0, income_taxes.taxable_income(work_income)

    def _succession_taxes(
        self,
        year: int,
        family: Family,
        patrimoine: Patrimoine,
        run: _RunState,
        rates: RatePair,
        inflation: float,
    ) -> tuple[float, float]:
        """Inheritance taxes due for the adults deceased in `year`."""
        fm = self.fiscal_model
        legal_tax = life_insurance_tax = 0.0
        children = [c.name for c in family.children]

        periodic_values = [
            (p, p.value_at_end_of(year, p.interest_rate_type.rate(*rates)))
            for p in patrimoine.periodic_investments
        ]
        financial = [(s.investment, s.value) for s in run.free] + periodic_values

        for deceased in family.deceased_in(year):
            spouse = next((a.name for a in family.adults_alive(year) if a.name != deceased.name), None)

            # legal estate: everything but life insurance
            estate = sum(
                item.owned_fraction(deceased.name) * value
                for item, value in financial
                if item.envelope.as_life_insurance_clause() is None
            )
            estate += sum(
                e.owned_fraction(deceased.name) * e.value_at_end_of(year, inflation)
                for e in patrimoine.real_estates
            )
            _, child_share = InheritanceDonationModel.legal_shares(len(children), spouse is not None)
            for _ in children:
                legal_tax += fm.inheritance_donation.heritage_of_child(estate * child_share).tax

            # life insurance, transferred per clause
            received: dict[str, float] = {}
            for item, value in financial:
                clause = item.envelope.as_life_insurance_clause()
                capital = item.owned_fraction(deceased.name) * value
                if clause is None or capital <= 0:
                    continue
                beneficiaries = clause.beneficiaries or ((spouse,) if spouse else tuple(children))
                for beneficiary in beneficiaries:
                    received[beneficiary] = received.get(beneficiary, 0.0) + capital / len(beneficiaries)
            for beneficiary, capital in received.items():
                if beneficiary == spouse:
                    heritage = fm.life_insurance_inheritance.heritage_to_spouse(capital)
                else:
                    heritage = fm.life_insurance_inheritance.heritage_to_child(capital)
                life_insurance_tax += heritage.tax

        return legal_tax, life_insurance_tax

    def _invest(self, net_cash_flow: float, year: int, run: _RunState) -> None:
        """Invest a surplus, or cover a deficit from cash then the free investments.

        Raises:
            InsufficientFundsError: the financial assets cannot cover the deficit
        """
        if net_cash_flow >= 0:
            if run.free:
                run.free[0].deposit(net_cash_flow)
            else:
                run.cash += net_cash_flow
            return

        remaining = -net_cash_flow
        taken = min(remaining, run.cash)
        run.cash -= taken
        remaining -= taken

        rebate = self.fiscal_model.life_insurance_taxes.rebate_per_person
        for state in run.free:
            if remaining <= 0:
                break
            taken, gain = state.withdraw(remaining)
            remaining -= taken
            run.realize(state.investment, gain, rebate)

        if remaining > 0:
            log.warning("financial_assets_exhausted", title=self.title, year=year, shortfall=round(remaining, 2))
            raise InsufficientFundsError(year, remaining)

    def _balance_sheet_line(
        self,
        year: int,
        patrimoine: Patrimoine,
        run: _RunState,
        rates: RatePair,
        inflation: float,
    ) -> BalanceSheetLine:
        assets: list[tuple[str, float]] = [(CASH_ACCOUNT, run.cash)]
        financial_assets = run.cash
        for state in run.free:
            assets.append((state.name, state.value))
            financial_assets += state.value
        for periodic in patrimoine.periodic_investments:
            value = periodic.value_at_end_of(year, periodic.interest_rate_type.rate(*rates))
            assets.append((periodic.name, value))
            financial_assets += value
        for estate in patrimoine.real_estates:
            assets.append((estate.name, estate.value_at_end_of(year, inflation)))

        liabilities: list[tuple[str, float]] = []
        for loan in patrimoine.loans:
            liabilities.append((loan.name, loan.value_at_end_of(year)))
        for debt in patrimoine.debts:
            liabilities.append((debt.name, debt.value_at_end_of(year)))

        return BalanceSheetLine(
            year=year,
            secured_rate=rates.secured_rate,
            stock_rate=rates.stock_rate,
            inflation=inflation,
            assets=NamedValueTable("ACTIF", assets),
            liabilities=NamedValueTable("PASSIF", liabilities),
            financial_assets=financial_assets,
        )
