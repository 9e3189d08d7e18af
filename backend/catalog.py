from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

MACHINE_TYPES = ("pagseguro", "subadquirente")
DEFAULT_INSTALLMENTS = 12


@dataclass(frozen=True)
class Tier:
    min: int
    unit_price: float
    max: Optional[int] = None

    def contains(self, quantity: int) -> bool:
        return quantity >= self.min and (self.max is None or quantity <= self.max)


@dataclass(frozen=True)
class MachineOption:
    name: str
    price: Optional[float] = None
    installment_price: Optional[float] = None
    installments: int = DEFAULT_INSTALLMENTS
    tiers: Tuple[Tier, ...] = ()
    allow_auto_installment: bool = False


Catalog = Mapping[str, Tuple[MachineOption, ...]]

PAGSEGURO_MACHINES: Tuple[MachineOption, ...] = (
    MachineOption(name="Smart", price=196.08, installment_price=16.34),
    MachineOption(name="Moderninha Pro", price=107.88, installment_price=8.99),
    MachineOption(name="Minizinha Chip", price=47.88, installment_price=3.99),
)

SUB_MACHINES: Tuple[MachineOption, ...] = (
    MachineOption(name="POS A960", price=826.0, installment_price=69.0),
    MachineOption(
        name="S920",
        tiers=(Tier(min=1, max=10, unit_price=245.0),),
        allow_auto_installment=True,
    ),
)

DEFAULT_CATALOG: Catalog = {
    "pagseguro": PAGSEGURO_MACHINES,
    "subadquirente": SUB_MACHINES,
}


class CatalogError(ValueError):
    pass


def _optional_number(value: Any, cast: Callable[[Any], Any]) -> Any:
    return cast(value) if value is not None else None


def _parse_tier(raw: Dict[str, Any]) -> Tier:
    if not isinstance(raw, dict):
        raise CatalogError(f"Invalid tier: {raw!r}")
    try:
        return Tier(
            min=int(raw["min"]),
            max=_optional_number(raw.get("max"), int),
            unit_price=float(raw["unit_price"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"Invalid tier: {raw!r}") from exc


def _check_tiers(name: str, tiers: Tuple[Tier, ...]) -> None:
    previous: Optional[Tier] = None
    for tier in tiers:
        if tier.max is not None and tier.max < tier.min:
            raise CatalogError(f"{name}: tier {tier.min}-{tier.max} is empty")
        if previous is not None:
            if previous.max is None or tier.min <= previous.max:
                raise CatalogError(f"{name}: tiers must be sorted and disjoint")
        previous = tier


def _parse_machine(raw: Dict[str, Any]) -> MachineOption:
    if not isinstance(raw, dict):
        raise CatalogError(f"Invalid machine entry: {raw!r}")
    name = str(raw.get("name") or "").strip()
    if not name:
        raise CatalogError("Machine without name")
    raw_tiers = raw.get("tiers") or []
    if not isinstance(raw_tiers, list):
        raise CatalogError(f"{name}: tiers must be a list")
    tiers = tuple(_parse_tier(item) for item in raw_tiers)
    if raw.get("price") is None and not tiers:
        raise CatalogError(f"{name}: either price or tiers is required")
    _check_tiers(name, tiers)
    try:
        price = _optional_number(raw.get("price"), float)
        installment_price = _optional_number(raw.get("installment_price"), float)
        installments = _optional_number(raw.get("installments"), int)
    except (TypeError, ValueError) as exc:
        raise CatalogError(f"{name}: prices and installments must be numbers") from exc
    return MachineOption(
        name=name,
        price=price,
        installment_price=installment_price,
        installments=installments if installments is not None else DEFAULT_INSTALLMENTS,
        tiers=tiers,
        allow_auto_installment=bool(raw.get("allow_auto_installment", False)),
    )


def parse_catalog(data: Dict[str, Any]) -> Catalog:
    catalog: Dict[str, Tuple[MachineOption, ...]] = {}
    for machine_type in MACHINE_TYPES:
        entries = data.get(machine_type) or []
        if not isinstance(entries, list):
            raise CatalogError(f"{machine_type} must be a list of machines")
        machines = tuple(_parse_machine(item) for item in entries)
        names = [machine.name for machine in machines]
        if len(names) != len(set(names)):
            raise CatalogError(f"Duplicate machine names in {machine_type}")
        catalog[machine_type] = machines
    return catalog


def load_catalog(path: str | Path | None) -> Catalog:
    if not path:
        return DEFAULT_CATALOG
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise CatalogError("Catalog file must contain an object")
    return parse_catalog(data)


def machines_for(catalog: Catalog, machine_type: str) -> Tuple[MachineOption, ...]:
    return catalog.get(machine_type, ())


def find_machine(
    catalog: Catalog, machine_type: str, name: str
) -> Optional[MachineOption]:
    for machine in machines_for(catalog, machine_type):
        if machine.name == name:
            return machine
    return None
