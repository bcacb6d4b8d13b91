"""Unit tests for patrimoine.domain.calculator.valued_taxes module."""

from dataclasses import FrozenInstanceError

import pytest

from patrimoine.domain.calculator.taxes import IsfSummary
from patrimoine.domain.calculator.valued_taxes import NamedValueTable, TaxCategory, ValuedTaxes


class TestNamedValueTable:
    def test_headers_end_with_total(self):
        table = NamedValueTable("Revenus").appended("Travail Alice", 48_000).appended("Loyers Studio", 7_200)
        assert table.headers == ["Travail Alice", "Loyers Studio", "REVENUS TOTAL"]
        assert table.values == [48_000, 7_200, 55_200]

    def test_empty_table(self):
        table = NamedValueTable("Dépenses")
        assert table.total == 0
        assert table.headers == ["DÉPENSES TOTAL"]

    def test_appended_leaves_table_unchanged(self):
        table = NamedValueTable("Revenus", [("Travail Alice", 48_000)])
        longer = table.appended("Loyers Studio", 7_200)
        assert table.named_values == (("Travail Alice", 48_000),)
        assert longer.total == pytest.approx(55_200)

    def test_table_is_immutable(self):
        table = NamedValueTable("Revenus", [("Travail Alice", 48_000)])
        with pytest.raises(AttributeError):
            table.named_values.append(("Bonus", 1_000))
        with pytest.raises(FrozenInstanceError):
            table.named_values = ()


class TestValuedTaxes:
    def test_categories_in_declaration_order(self):
        taxes = ValuedTaxes()
        assert list(taxes.per_category) == [
            TaxCategory.IRPP,
            TaxCategory.ISF,
            TaxCategory.SUCCESSION,
            TaxCategory.SOCIAL_TAXES,
            TaxCategory.LOCAL_TAXES,
        ]

    def test_fresh_taxes_are_empty(self):
        taxes = ValuedTaxes()
        assert all(table.named_values == () for table in taxes.per_category.values())
        assert [table.table_name for table in taxes.per_category.values()] == [c.label for c in TaxCategory]
        assert taxes.total == 0

    def test_given_tables_are_put_back_in_order(self):
        local = NamedValueTable(TaxCategory.LOCAL_TAXES.label, [("Studio", 800)])
        taxes = ValuedTaxes(per_category={TaxCategory.LOCAL_TAXES: local})
        assert list(taxes.per_category)[0] is TaxCategory.IRPP
        assert list(taxes.per_category)[-1] is TaxCategory.LOCAL_TAXES
        assert taxes.per_category[TaxCategory.LOCAL_TAXES] is local
        assert taxes.total == pytest.approx(800)

    def test_add_and_total(self):
        taxes = ValuedTaxes()
        taxes.add(TaxCategory.IRPP, "Revenus", 12_000)
        taxes.add(TaxCategory.SOCIAL_TAXES, "Loyers", 1_200)
        taxes.add(TaxCategory.LOCAL_TAXES, "Studio", 800)
        assert taxes.total == pytest.approx(14_000)

    def test_per_category_total(self):
        taxes = ValuedTaxes()
        taxes.add(TaxCategory.IRPP, "Revenus", 12_000)
        taxes.add(TaxCategory.IRPP, "Plus-values immobilières", 3_000)
        rollup = taxes.per_category_total()
        assert rollup.names_array == [c.label for c in TaxCategory]
        assert rollup.values_array[0] == pytest.approx(15_000)
        assert rollup.total == pytest.approx(15_000)

    def test_headers_and_values_align(self):
        taxes = ValuedTaxes()
        taxes.add(TaxCategory.ISF, "ISF", 2_225)
        assert len(taxes.headers) == len(taxes.values)
        assert taxes.headers[-1] == "TAXES TOTAL"
        assert "ISF TOTAL" in taxes.headers
        assert taxes.values[-1] == pytest.approx(2_225)


class TestFrozenTaxes:
    @pytest.fixture
    def frozen(self):
        taxes = ValuedTaxes()
        taxes.add(TaxCategory.IRPP, "Revenus", 12_000)
        taxes.isf = IsfSummary(0.0, 900_000.0, 0.0)
        return taxes.freeze()

    def test_keeps_amounts(self, frozen):
        assert frozen.frozen
        assert frozen.total == pytest.approx(12_000)
        assert frozen.isf.taxable == 900_000.0
        assert frozen.freeze() is frozen

    def test_add_is_rejected(self, frozen):
        with pytest.raises(FrozenInstanceError):
            frozen.add(TaxCategory.IRPP, "Rappel", 1_000_000)
        assert frozen.total == pytest.approx(12_000)

    def test_fields_are_read_only(self, frozen):
        with pytest.raises(FrozenInstanceError):
            frozen.isf = None
        with pytest.raises(TypeError):
            frozen.per_category[TaxCategory.IRPP] = NamedValueTable("IRPP")

    def test_source_stays_independent(self):
        taxes = ValuedTaxes()
        taxes.add(TaxCategory.IRPP, "Revenus", 12_000)
        frozen = taxes.freeze()
        taxes.add(TaxCategory.IRPP, "Rappel", 500)
        assert frozen.total == pytest.approx(12_000)
        assert taxes.total == pytest.approx(12_500)
