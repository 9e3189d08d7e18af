from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from auth import require_admin
from schemas import (
    AdminOrderStatusUpdate,
    OrderListResponse,
    OrderStatus,
    OrderStatusUpdateResponse,
)
from services import orders_service
from services.orders_service import (
    InvalidStatusTransition,
    OrderNotFoundError,
    OrderStoreError,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get(
    "/orders",
    response_model=OrderListResponse,
    dependencies=[Depends(require_admin)],
)
async def read_all_orders(
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> OrderListResponse:
    try:
        items = await orders_service.list_all_orders(
            status=status_filter,
            search=search.strip() if search else None,
            limit=limit,
        )
    except OrderStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return OrderListResponse(items=items)


@router.patch(
    "/orders/{order_id}/status",
    response_model=OrderStatusUpdateResponse,
    dependencies=[Depends(require_admin)],
)
async def change_any_order_status(
    order_id: str,
    payload: AdminOrderStatusUpdate,
) -> OrderStatusUpdateResponse:
    try:
        order = await orders_service.update_any_order_status(order_id, payload.status)
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except OrderStoreError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return OrderStatusUpdateResponse(ok=True, order=order)
