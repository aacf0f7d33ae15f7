from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from app.core.dependencies import get_current_account, get_current_admin, get_dispatcher
from app.db.connection import get_db
from app.models.roles import OrderStatus
from app.models.schemas import CreateOrderRequest, OrderResponse, UpdateOrderStatusRequest
from app.services.notifications import NotificationDispatcher
from app.services.order_service import OrderService

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: CreateOrderRequest,
    current_account: Dict[str, Any] = Depends(get_current_account),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db=Depends(get_db),
):
    """
    Submit a payout order.

    - **amount**: USDT amount, greater than 0, at most 8 decimal places
    - **address**: ERC20 (`0x` + 40 hex) or TRC20 (`T` + 33 Base58) address;
      the network is inferred from the format
    """
    return OrderService(db, dispatcher).create_order(current_account, payload.amount, payload.address)


@router.get("", response_model=List[OrderResponse])
def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_account: Dict[str, Any] = Depends(get_current_account),
    db=Depends(get_db),
):
    """Merchants see their own orders; admins see every order"""
    return OrderService(db).list_orders(
        current_account,
        status=order_status.value if order_status else None,
        limit=limit,
        offset=offset,
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    current_account: Dict[str, Any] = Depends(get_current_account),
    db=Depends(get_db),
):
    return OrderService(db).get_order(current_account, order_id)


@router.post("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    payload: UpdateOrderStatusRequest,
    current_admin: Dict[str, Any] = Depends(get_current_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db=Depends(get_db),
):
    """
    Complete or reject a pending order (admin only).

    Completed and rejected are final; any further change, including
    repeating the same status, returns 409.
    """
    return OrderService(db, dispatcher).transition_order(current_admin, order_id, payload.status)
