"""
Order form rules: validation, delivery address assembly and the record
that gets persisted for a submitted form.
"""

from typing import Any, Dict, Optional

from auth import AuthUser
from catalog import MachineOption
from schemas import OrderForm, QuoteResponse
from services.catalog_service import get_machine
from services.pricing_service import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    clamp_installments,
    clamp_quantity,
    compute_totals,
    installment_label,
    round_price,
)

CEP_LENGTH = 8


class OrderValidationError(ValueError):
    pass


def only_digits(value: Optional[str]) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())


def initial_form() -> OrderForm:
    return OrderForm()


def validate_order_form(form: OrderForm) -> Optional[str]:
    if not form.customer_name.strip():
        return "Informe o nome completo."
    if not form.customer_phone.strip():
        return "Informe o telefone."
    if form.machine_type == "pagseguro" and not form.pagseguro_email.strip():
        return "Informe o e-mail PagSeguro."
    if len(only_digits(form.delivery_cep)) != CEP_LENGTH:
        return "Informe um CEP válido (8 dígitos)."
    if not form.delivery_street.strip():
        return "Informe a rua."
    if not form.delivery_number.strip():
        return "Informe o número."
    if not form.delivery_neighborhood.strip():
        return "Informe o bairro."
    if not form.delivery_city.strip():
        return "Informe a cidade."
    if not form.delivery_state.strip():
        return "Informe o estado (UF)."
    if not form.selected_machine.strip():
        return "Selecione uma maquininha."
    if get_machine(form.machine_type, form.selected_machine) is None:
        return "Maquininha inválida."
    qty = clamp_quantity(form.quantity)
    if qty < MIN_QUANTITY or qty > MAX_QUANTITY:
        return f"A quantidade deve estar entre {MIN_QUANTITY} e {MAX_QUANTITY}."
    return None


def require_machine(form: OrderForm) -> MachineOption:
    error = validate_order_form(form)
    if error:
        raise OrderValidationError(error)
    machine = get_machine(form.machine_type, form.selected_machine)
    if machine is None:
        raise OrderValidationError("Maquininha inválida.")
    return machine


def build_delivery_address(form: OrderForm) -> str:
    cep = only_digits(form.delivery_cep)
    street = form.delivery_street.strip()
    number = form.delivery_number.strip()
    complement = form.delivery_complement.strip()
    neighborhood = form.delivery_neighborhood.strip()
    city = form.delivery_city.strip()
    uf = form.delivery_state.strip().upper()

    line1 = f"{street}, {number}" + (f" - {complement}" if complement else "")
    line2 = f"{neighborhood} - {city}/{uf}"
    return f"{cep} - {line1} • {line2}"


def _optional_text(value: str) -> Optional[str]:
    text = value.strip()
    return text or None


def build_order_payload(
    form: OrderForm, user: AuthUser, machine: MachineOption
) -> Dict[str, Any]:
    qty = clamp_quantity(form.quantity)
    totals = compute_totals(machine, qty, form.payment_method, form.installments)
    parcelado = form.payment_method == "parcelado"
    record: Dict[str, Any] = {
        "created_by": user.id,
        "user_email": user.email,
        "customer_name": form.customer_name.strip(),
        "customer_phone": form.customer_phone.strip(),
        "customer_email": _optional_text(form.customer_email),
        "pagseguro_email": (
            _optional_text(form.pagseguro_email)
            if form.machine_type == "pagseguro"
            else None
        ),
        "delivery_address": build_delivery_address(form),
        "machine_type": form.machine_type,
        "selected_machine": form.selected_machine,
        "quantity": qty,
        "payment_method": form.payment_method,
        "installments": clamp_installments(form.installments) if parcelado else None,
        "total_price": totals.total_avista,
        "installment_price": round_price(totals.unit_installment),
        "status": "pending",
        "whatsapp_sent": False,
    }
    return {key: value for key, value in record.items() if value is not None}


def build_quote(form: OrderForm) -> QuoteResponse:
    machine = get_machine(form.machine_type, form.selected_machine)
    if machine is None:
        raise OrderValidationError("Selecione uma maquininha.")
    qty = clamp_quantity(form.quantity)
    totals = compute_totals(machine, qty, form.payment_method, form.installments)
    return QuoteResponse(
        machine_type=form.machine_type,
        selected_machine=machine.name,
        quantity=qty,
        payment_method=form.payment_method,
        unit_price=totals.unit_price,
        total_avista=totals.total_avista,
        installments=totals.installments,
        unit_installment=round_price(totals.unit_installment),
        total_installment=round_price(totals.total_installment),
        installment_label=installment_label(totals.installments, totals.unit_installment),
    )
