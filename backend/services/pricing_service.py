import math
from dataclasses import dataclass
from typing import Any, Optional

from catalog import DEFAULT_INSTALLMENTS, MachineOption

MIN_QUANTITY = 1
MAX_QUANTITY = 1000
MIN_INSTALLMENTS = 2
MAX_INSTALLMENTS = 12
PRICE_PRECISION = 2


@dataclass(frozen=True)
class OrderTotals:
    unit_price: float
    total_avista: float
    installments: int
    unit_installment: Optional[float]
    total_installment: Optional[float]


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def clamp_quantity(value: Any) -> int:
    number = _to_float(value)
    if not math.isfinite(number):
        return MIN_QUANTITY
    return min(max(math.trunc(number), MIN_QUANTITY), MAX_QUANTITY)


def clamp_installments(value: Any) -> int:
    number = _to_float(value)
    if not math.isfinite(number):
        return DEFAULT_INSTALLMENTS
    return min(max(math.trunc(number), MIN_INSTALLMENTS), MAX_INSTALLMENTS)


def resolve_unit_price(machine: MachineOption, quantity: Any) -> float:
    if machine.tiers:
        qty = clamp_quantity(quantity)
        for tier in machine.tiers:
            if tier.contains(qty):
                return tier.unit_price
        # no range matched: last tier wins
        return machine.tiers[-1].unit_price
    return machine.price if machine.price is not None else 0.0


def resolve_unit_installment(machine: MachineOption, quantity: Any) -> Optional[float]:
    if machine.installment_price is not None:
        return machine.installment_price
    if not machine.allow_auto_installment:
        return None
    installments = machine.installments
    unit_price = resolve_unit_price(machine, quantity)
    if unit_price <= 0 or installments <= 0:
        return None
    return unit_price / installments


def compute_totals(
    machine: MachineOption,
    quantity: Any,
    payment_method: str,
    installments: Any = DEFAULT_INSTALLMENTS,
) -> OrderTotals:
    """Price summary for ``quantity`` units of ``machine``.

    For ``parcelado`` the unit installment is the unit price split over the
    chosen installment count; otherwise it is whatever the catalog offers.
    ``total_installment`` is one installment across all units, not the
    financed amount.
    """
    qty = clamp_quantity(quantity)
    unit_price = resolve_unit_price(machine, qty)
    if payment_method == "parcelado":
        count = clamp_installments(installments)
        unit_installment: Optional[float] = unit_price / count
    else:
        count = machine.installments
        unit_installment = resolve_unit_installment(machine, qty)
    total_installment = unit_installment * qty if unit_installment is not None else None
    return OrderTotals(
        unit_price=unit_price,
        total_avista=round(unit_price * qty, PRICE_PRECISION),
        installments=count,
        unit_installment=unit_installment,
        total_installment=total_installment,
    )


def round_price(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value, PRICE_PRECISION)


def format_brl(value: float) -> str:
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def installment_label(count: int, unit_installment: Optional[float]) -> Optional[str]:
    if unit_installment is None:
        return None
    return f"{count}x de {format_brl(unit_installment)} sem juros"
