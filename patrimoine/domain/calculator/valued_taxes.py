"""Category-keyed aggregation of the taxes paid in a year."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from patrimoine.domain.calculator.taxes import IrppSummary, IsfSummary


class TaxCategory(Enum):
    IRPP = "IRPP"
    ISF = "ISF"
    SUCCESSION = "Droits Succession"
    SOCIAL_TAXES = "Prélev Sociaux"
    LOCAL_TAXES = "Taxes Locales"

    @property
    def label(self) -> str:
        return self.value

    @property
    def ordinal(self) -> int:
        return TAX_CATEGORY_ORDINALS[self]


TAX_CATEGORY_ORDINALS: dict[TaxCategory, int] = {
    TaxCategory.IRPP: 0,
    TaxCategory.ISF: 1,
    TaxCategory.SUCCESSION: 2,
    TaxCategory.SOCIAL_TAXES: 3,
    TaxCategory.LOCAL_TAXES: 4,
}


@dataclass(frozen=True)
class NamedValueTable:
    """Ordered (name, value) pairs with a total. Immutable: `appended` returns a new table."""

    table_name: str
    named_values: tuple[tuple[str, float], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "named_values", tuple((name, value) for name, value in self.named_values))

    def appended(self, name: str, value: float) -> NamedValueTable:
        return NamedValueTable(self.table_name, self.named_values + ((name, value),))

    @property
    def total(self) -> float:
        return sum(value for _, value in self.named_values)

    @property
    def names_array(self) -> list[str]:
        return [name for name, _ in self.named_values]

    @property
    def values_array(self) -> list[float]:
        return [value for _, value in self.named_values]

    @property
    def headers(self) -> list[str]:
        return self.names_array + [f"{self.table_name.upper()} TOTAL"]

    @property
    def values(self) -> list[float]:
        return self.values_array + [self.total]


@dataclass
class ValuedTaxes:
    """Taxes of one year, one table per category in declaration order.

    Filled with `add` while the year is computed, then `freeze` returns the
    read-only copy stored in the cash flow row.
    """

    name: str = "TAXES"
    per_category: Mapping[TaxCategory, NamedValueTable] = field(default_factory=dict)
    irpp: Optional[IrppSummary] = None
    isf: Optional[IsfSummary] = None
    frozen: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self):
        given = dict(self.per_category)
        ordered = {
            category: given.get(category, NamedValueTable(category.label))
            for category in sorted(TaxCategory, key=lambda c: c.ordinal)
        }
        object.__setattr__(self, "per_category", MappingProxyType(ordered) if self.frozen else ordered)

    def __setattr__(self, name, value):
        if getattr(self, "frozen", False):
            raise FrozenInstanceError(f"cannot assign to field {name!r} of frozen taxes")
        super().__setattr__(name, value)

    def add(self, category: TaxCategory, label: str, amount: float) -> None:
        if self.frozen:
            raise FrozenInstanceError(f"cannot add {label!r} to frozen taxes")
        self.per_category[category] = self.per_category[category].appended(label, amount)

    def freeze(self) -> ValuedTaxes:
        if self.frozen:
            return self
        return ValuedTaxes(self.name, self.per_category, self.irpp, self.isf, frozen=True)

    @property
    def total(self) -> float:
        return sum(table.total for table in self.per_category.values())

    def per_category_total(self) -> NamedValueTable:
        """Roll-up with one entry per category."""
        return NamedValueTable(
            self.name,
            [(category.label, table.total) for category, table in self.per_category.items()],
        )

    @property
    def headers(self) -> list[str]:
        return [h for table in self.per_category.values() for h in table.headers] + [f"{self.name} TOTAL"]

    @property
    def values(self) -> list[float]:
        return [v for table in self.per_category.values() for v in table.values] + [self.total]
