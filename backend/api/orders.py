from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from auth import AuthUser, get_current_user
from schemas import (
    OrderCreateResponse,
    OrderForm,
    OrderListResponse,
    OrderStatusUpdate,
    OrderStatusUpdateResponse,
    QuoteResponse,
)
from services import orders_service
from services.order_form import OrderValidationError, build_quote
from services.orders_service import (
    InvalidStatusTransition,
    OrderNotFoundError,
    OrderPermissionError,
    OrderStoreError,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderForm,
    user: AuthUser = Depends(get_current_user),
) -> OrderCreateResponse:
    try:
        return await orders_service.submit_order(payload, user)
    except OrderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except OrderStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc


@router.post("/quote", response_model=QuoteResponse)
async def quote_order(payload: OrderForm) -> QuoteResponse:
    try:
        return build_quote(payload)
    except OrderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get("", response_model=OrderListResponse)
async def read_my_orders(
    limit: Optional[int] = None,
    user: AuthUser = Depends(get_current_user),
) -> OrderListResponse:
    try:
        items = await orders_service.list_my_orders(user, limit)
    except OrderStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return OrderListResponse(items=items)


@router.patch("/{order_id}/status", response_model=OrderStatusUpdateResponse)
async def change_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    user: AuthUser = Depends(get_current_user),
) -> OrderStatusUpdateResponse:
    try:
        order = await orders_service.update_order_status(
            user,
            order_id,
            payload.status,
            payload.whatsapp_sent,
        )
    except OrderNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except OrderPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except OrderStoreError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return OrderStatusUpdateResponse(ok=True, order=order)
