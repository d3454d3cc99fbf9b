from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db
from dependencies.rbac import RequestContext
from utils.errors import MarketplaceError, StoreError
from utils.response_helpers import safe_model_validate, safe_model_validate_list, order_request_to_dict
from .schemas import (
    OrderRequestCreate, OrderStatusUpdate, OrderRequestResponse, OrderRequestEnvelope,
    SupplierOrderRequestResponse, VendorOrderRequestResponse
)
from .workflow import create_order_request, update_order_request_status, list_for_supplier, list_for_vendor
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Order Requests"])


@router.post("/order-requests", response_model=OrderRequestEnvelope, status_code=status.HTTP_201_CREATED)
async def place_order_request(
    order_data: OrderRequestCreate,
    db: AsyncSession = Depends(get_db)
):
    """Send a direct purchase request to a supplier (vendors only)"""
    ctx = RequestContext(user_id=order_data.user_id, user_role=order_data.user_role)
    try:
        order_request = await create_order_request(
            db,
            ctx,
            supplier_id=order_data.supplier_id,
            product_id=order_data.product_id,
            quantity=order_data.quantity,
            notes=order_data.notes
        )
        return OrderRequestEnvelope(
            message="Order request submitted successfully!",
            request=safe_model_validate(OrderRequestResponse, order_request_to_dict(order_request))
        )

    except MarketplaceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating order request: {str(e)}")
        raise StoreError("Failed to create order request", detail=str(e))


@router.get("/supplier/order-requests/{supplier_id}", response_model=List[SupplierOrderRequestResponse])
async def get_supplier_order_requests(supplier_id: str, db: AsyncSession = Depends(get_db)):
    """Requests addressed to a supplier, latest first"""
    try:
        requests = await list_for_supplier(db, supplier_id)
        return safe_model_validate_list(SupplierOrderRequestResponse, requests)
    except Exception as e:
        logger.error(f"Error fetching supplier's order requests: {str(e)}")
        raise StoreError("Failed to fetch order requests", detail=str(e))


@router.put("/supplier/order-requests/{request_id}/status", response_model=OrderRequestEnvelope)
async def set_order_request_status(
    request_id: str,
    status_data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Accept or decline a pending request (owning supplier only)"""
    ctx = RequestContext(user_id=status_data.user_id, user_role=status_data.user_role)
    try:
        order_request = await update_order_request_status(db, request_id, ctx, status_data.status)
        return OrderRequestEnvelope(
            message=f"Order request status updated to {order_request.status}.",
            request=safe_model_validate(OrderRequestResponse, order_request_to_dict(order_request))
        )

    except MarketplaceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating order request status: {str(e)}")
        raise StoreError("Failed to update order request status", detail=str(e))


@router.get("/vendor/my-order-requests/{vendor_id}", response_model=List[VendorOrderRequestResponse])
async def get_vendor_order_requests(vendor_id: str, db: AsyncSession = Depends(get_db)):
    """Requests a vendor has placed, latest first"""
    try:
        requests = await list_for_vendor(db, vendor_id)
        return safe_model_validate_list(VendorOrderRequestResponse, requests)
    except Exception as e:
        logger.error(f"Error fetching vendor's order requests: {str(e)}")
        raise StoreError("Failed to fetch your order requests", detail=str(e))
