from typing import List, Optional

from catalog import Catalog, MachineOption, find_machine, load_catalog, machines_for
from config import settings
from schemas import CatalogResponse, MachineCard
from services.pricing_service import (
    clamp_quantity,
    installment_label,
    resolve_unit_installment,
    resolve_unit_price,
    round_price,
)

_catalog: Catalog = load_catalog(settings.catalog_path)


def get_catalog() -> Catalog:
    return _catalog


def get_machine(machine_type: str, name: str) -> Optional[MachineOption]:
    return find_machine(_catalog, machine_type, name)


def _machine_card(machine: MachineOption, quantity: int) -> MachineCard:
    unit_price = resolve_unit_price(machine, quantity)
    unit_installment = resolve_unit_installment(machine, quantity)
    return MachineCard(
        name=machine.name,
        unit_price=unit_price,
        total_price=round_price(unit_price * quantity),
        installments=machine.installments,
        unit_installment=round_price(unit_installment),
        installment_label=installment_label(machine.installments, unit_installment),
        tiered=bool(machine.tiers),
    )


def build_catalog_response(machine_type: str, quantity: float) -> CatalogResponse:
    qty = clamp_quantity(quantity)
    cards: List[MachineCard] = [
        _machine_card(machine, qty) for machine in machines_for(_catalog, machine_type)
    ]
    return CatalogResponse(machine_type=machine_type, quantity=qty, machines=cards)
