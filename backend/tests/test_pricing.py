import math

import pytest

from catalog import MachineOption, Tier
from services.pricing_service import (
    clamp_installments,
    clamp_quantity,
    compute_totals,
    format_brl,
    installment_label,
    resolve_unit_installment,
    resolve_unit_price,
)

TIERED = MachineOption(
    name="S920",
    tiers=(
        Tier(min=1, max=10, unit_price=525.0),
        Tier(min=11, max=19, unit_price=475.0),
        Tier(min=100, unit_price=325.0),
    ),
    allow_auto_installment=True,
)
SMART = MachineOption(name="Smart", price=196.08, installment_price=16.34)


class TestClampQuantity:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, 5),
            (5.9, 5),
            (-3, 1),
            (0, 1),
            (1001, 1000),
            (math.nan, 1),
            (math.inf, 1),
            (None, 1),
            ("abc", 1),
            ("12", 12),
        ],
    )
    def test_clamps(self, value, expected):
        assert clamp_quantity(value) == expected

    @pytest.mark.parametrize("value", [-10, 0, 1, 7.5, 999, 1000, 5000, math.nan])
    def test_idempotent(self, value):
        once = clamp_quantity(value)
        assert clamp_quantity(once) == once


class TestClampInstallments:
    @pytest.mark.parametrize(
        "value, expected",
        [(1, 2), (2, 2), (6.7, 6), (12, 12), (24, 12), (math.nan, 12), (-math.inf, 12)],
    )
    def test_clamps(self, value, expected):
        assert clamp_installments(value) == expected


class TestResolveUnitPrice:
    @pytest.mark.parametrize(
        "quantity, expected",
        [(1, 525.0), (10, 525.0), (11, 475.0), (19, 475.0), (100, 325.0), (1000, 325.0)],
    )
    def test_tier_containing_quantity(self, quantity, expected):
        assert resolve_unit_price(TIERED, quantity) == expected

    def test_gap_falls_back_to_last_tier(self):
        assert resolve_unit_price(TIERED, 50) == 325.0

    def test_quantity_clamped_before_lookup(self):
        assert resolve_unit_price(TIERED, 0) == 525.0
        assert resolve_unit_price(TIERED, 10_000) == 325.0

    def test_flat_price(self):
        assert resolve_unit_price(SMART, 7) == 196.08

    def test_missing_price_is_zero(self):
        assert resolve_unit_price(MachineOption(name="Sem preço"), 3) == 0.0


class TestResolveUnitInstallment:
    @pytest.mark.parametrize("quantity", [1, 3, 500])
    def test_fixed_installment_ignores_quantity(self, quantity):
        assert resolve_unit_installment(SMART, quantity) == 16.34

    @pytest.mark.parametrize("quantity", [1, 15, 100])
    def test_auto_installment(self, quantity):
        expected = resolve_unit_price(TIERED, quantity) / 12
        assert resolve_unit_installment(TIERED, quantity) == pytest.approx(expected)

    def test_auto_installment_uses_machine_count(self):
        machine = MachineOption(
            name="X", price=120.0, installments=6, allow_auto_installment=True
        )
        assert resolve_unit_installment(machine, 1) == pytest.approx(20.0)

    def test_unavailable_without_auto(self):
        assert resolve_unit_installment(MachineOption(name="X", price=100.0), 1) is None

    def test_non_positive_unit_price_is_unavailable(self):
        machine = MachineOption(name="X", price=0.0, allow_auto_installment=True)
        assert resolve_unit_installment(machine, 1) is None

    def test_non_positive_installments_is_unavailable(self):
        machine = MachineOption(
            name="X", price=100.0, installments=-1, allow_auto_installment=True
        )
        assert resolve_unit_installment(machine, 1) is None


class TestComputeTotals:
    def test_avista_total_is_unit_times_quantity(self):
        totals = compute_totals(SMART, 3, "avista")
        assert totals.unit_price == 196.08
        assert totals.total_avista == 588.24
        assert totals.installments == 12
        assert totals.unit_installment == 16.34
        assert totals.total_installment == pytest.approx(49.02)

    def test_parcelado_splits_unit_price_over_chosen_count(self):
        totals = compute_totals(SMART, 3, "parcelado", 10)
        assert totals.installments == 10
        assert totals.unit_installment == pytest.approx(19.608)
        assert totals.total_installment == pytest.approx(58.824)
        assert totals.total_avista == 588.24

    def test_parcelado_count_is_clamped(self):
        assert compute_totals(SMART, 1, "parcelado", 40).installments == 12
        assert compute_totals(SMART, 1, "parcelado", 1).installments == 2

    def test_no_installment_available(self):
        totals = compute_totals(MachineOption(name="X", price=50.0), 2, "avista")
        assert totals.unit_installment is None
        assert totals.total_installment is None


def test_format_brl():
    assert format_brl(1234.5) == "R$ 1.234,50"
    assert format_brl(16.34) == "R$ 16,34"
    assert format_brl(0) == "R$ 0,00"


def test_installment_label():
    assert installment_label(12, 16.34) == "12x de R$ 16,34 sem juros"
    assert installment_label(12, None) is None
