import asyncio
import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from auth import AuthUser
from repositories import orders_repository
from schemas import OrderCreateResponse, OrderForm, OrderResponse
from services.order_form import build_order_payload, initial_form, require_machine

logger = logging.getLogger("maquininhas")

MY_ORDERS_DEFAULT_LIMIT = 20
ADMIN_ORDERS_DEFAULT_LIMIT = 50
MAX_LIST_LIMIT = 100

STATUS_LABELS = {
    "pending": "Pendente",
    "sent": "Enviado",
    "completed": "Concluído",
    "cancelled": "Cancelado",
}
PAYMENT_METHOD_LABELS = {
    "avista": "À vista",
    "parcelado": "Parcelado",
}
ORDER_STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"sent", "cancelled"}),
    "sent": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}
SEARCH_FIELDS = (
    "customer_name",
    "customer_phone",
    "customer_email",
    "user_email",
    "selected_machine",
    "pagseguro_email",
    "delivery_address",
)


class OrderNotFoundError(LookupError):
    pass


class OrderPermissionError(PermissionError):
    pass


class InvalidStatusTransition(ValueError):
    pass


class OrderStoreError(RuntimeError):
    pass


def describe_error(exc: BaseException, default: str) -> str:
    for attr in ("message", "detail", "details"):
        value = getattr(exc, attr, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    if exc.args:
        first = exc.args[0]
        if isinstance(first, dict):
            message = first.get("message") or first.get("msg")
            if isinstance(message, str) and message.strip():
                return message.strip()
        elif isinstance(first, str) and first.strip():
            return first.strip()
    return str(exc).strip() or default


async def _call_store(default_message: str, func: Callable[..., Any], *args: Any) -> Any:
    try:
        return await asyncio.to_thread(func, *args)
    except Exception as exc:  # network/database error
        logger.exception("Order store call %s failed", func.__name__)
        raise OrderStoreError(describe_error(exc, default_message)) from exc


def _clamp_limit(limit: Optional[int], default: int) -> int:
    value = default if limit is None else int(limit)
    return min(max(value, 1), MAX_LIST_LIMIT)


def _format_order(row: Dict[str, Any]) -> OrderResponse:
    status = row.get("status") or "pending"
    payment_method = row.get("payment_method") or "avista"
    return OrderResponse(
        id=str(row["id"]),
        created_by=row.get("created_by"),
        user_email=row.get("user_email"),
        customer_name=row.get("customer_name") or "",
        customer_phone=row.get("customer_phone") or "",
        customer_email=row.get("customer_email"),
        pagseguro_email=row.get("pagseguro_email"),
        delivery_address=row.get("delivery_address"),
        machine_type=row.get("machine_type") or "subadquirente",
        selected_machine=row.get("selected_machine") or "",
        quantity=int(row.get("quantity") or 1),
        payment_method=payment_method,
        payment_method_label=PAYMENT_METHOD_LABELS.get(payment_method, payment_method),
        installments=row.get("installments"),
        total_price=float(row.get("total_price") or 0),
        installment_price=row.get("installment_price"),
        status=status,
        status_label=STATUS_LABELS.get(status, status),
        whatsapp_sent=bool(row.get("whatsapp_sent", False)),
        created_at=row.get("created_at"),
    )


def matches_search(row: Dict[str, Any], search: str) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    haystack = " ".join(str(row.get(field) or "") for field in SEARCH_FIELDS)
    return needle in haystack.lower()


def check_transition(current: str, new: str) -> None:
    if current == new:
        return
    allowed = ORDER_STATUS_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise InvalidStatusTransition(
            f"Não é possível alterar o status de "
            f"{STATUS_LABELS.get(current, current)} para {STATUS_LABELS.get(new, new)}."
        )


async def submit_order(form: OrderForm, user: AuthUser) -> OrderCreateResponse:
    machine = require_machine(form)
    record = build_order_payload(form, user, machine)
    row = await _call_store(
        "Falha ao enviar pedido.", orders_repository.insert_order, record
    )
    logger.info(
        "Order %s created by %s: %s x%s (%s)",
        row.get("id"),
        user.id,
        record["selected_machine"],
        record["quantity"],
        record["payment_method"],
    )
    return OrderCreateResponse(order=_format_order(row), form=initial_form())


async def list_my_orders(user: AuthUser, limit: Optional[int] = None) -> List[OrderResponse]:
    rows = await _call_store(
        "Falha ao carregar pedidos.",
        orders_repository.fetch_orders_by_creator,
        user.id,
        _clamp_limit(limit, MY_ORDERS_DEFAULT_LIMIT),
    )
    return [_format_order(row) for row in rows]


async def list_all_orders(
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[OrderResponse]:
    rows = await _call_store(
        "Falha ao carregar pedidos.",
        orders_repository.fetch_orders,
        status,
        _clamp_limit(limit, ADMIN_ORDERS_DEFAULT_LIMIT),
    )
    if search:
        rows = [row for row in rows if matches_search(row, search)]
    return [_format_order(row) for row in rows]


async def _load_order(order_id: str) -> Dict[str, Any]:
    row = await _call_store(
        "Falha ao carregar pedido.", orders_repository.fetch_order, order_id
    )
    if not row:
        raise OrderNotFoundError("Pedido não encontrado.")
    return row


async def _apply_status(
    row: Dict[str, Any], status: str, extra: Optional[Dict[str, Any]] = None
) -> OrderResponse:
    current = row.get("status") or "pending"
    check_transition(current, status)
    updates: Dict[str, Any] = {"status": status}
    updates.update(extra or {})
    updated = await _call_store(
        "Falha ao atualizar pedido.",
        orders_repository.update_order,
        str(row["id"]),
        updates,
        current,
    )
    if updated is None:
        # status moved since it was read
        raise InvalidStatusTransition(
            "O status do pedido foi alterado por outra operação. Recarregue e tente novamente."
        )
    logger.info("Order %s status %s -> %s", row["id"], current, status)
    return _format_order(updated)


async def update_order_status(
    user: AuthUser,
    order_id: str,
    status: str,
    whatsapp_sent: Optional[bool] = None,
) -> OrderResponse:
    row = await _load_order(order_id)
    owner = row.get("created_by")
    if owner and owner != user.id:
        raise OrderPermissionError("Não autorizado para alterar pedido de outro usuário.")
    extra = {"whatsapp_sent": whatsapp_sent} if whatsapp_sent is not None else None
    return await _apply_status(row, status, extra)


async def update_any_order_status(order_id: str, status: str) -> OrderResponse:
    row = await _load_order(order_id)
    return await _apply_status(row, status)
