"""
Vendor to supplier order requests.

Status moves once, Pending -> Accepted or Pending -> Declined. Ownership is a
plain field match on supplier_id; there is no token behind it.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from dependencies.rbac import RequestContext, ensure_permission
from models import OrderRequest, RequestStatus, UserRole
from repositories import UserRepository, OrderRequestRepository
from utils.errors import ValidationError, NotFound, InvalidTransition
from utils.response_helpers import parse_uuid, order_request_to_dict, user_public_to_dict
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

FINAL_STATUSES = (RequestStatus.ACCEPTED.value, RequestStatus.DECLINED.value)


async def create_order_request(
    db: AsyncSession,
    ctx: RequestContext,
    supplier_id: Optional[str],
    product_id: Optional[str],
    quantity: Optional[int],
    notes: Optional[str] = None
) -> OrderRequest:
    ensure_permission(ctx, "order-requests")

    product_id = product_id.strip() if product_id else product_id
    if not supplier_id or not product_id or quantity is None or not ctx.user_id:
        raise ValidationError("Missing required fields for order request.")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1.")

    supplier = await UserRepository(db).find_by_id(supplier_id)
    if supplier is None or supplier.role != UserRole.SUPPLIER.value:
        raise NotFound("Target supplier not found or is not a valid supplier.")

    order_request = await OrderRequestRepository(db).create(
        vendor_id=ctx.user_id,
        supplier_id=supplier_id,
        product_id=product_id,
        quantity=quantity,
        notes=notes or "",
        status=RequestStatus.PENDING.value
    )
    await db.commit()

    logger.info(f"Order request {order_request.id} created by {ctx.user_id} for supplier {supplier_id}")
    return order_request


async def update_order_request_status(
    db: AsyncSession,
    request_id: str,
    ctx: RequestContext,
    new_status: Optional[str]
) -> OrderRequest:
    ensure_permission(ctx, "order-requests/status")

    if new_status not in FINAL_STATUSES:
        raise ValidationError('Invalid status provided. Must be "Accepted" or "Declined".')

    request_uuid = parse_uuid(request_id)
    order_requests = OrderRequestRepository(db)
    order_request = None
    if request_uuid is not None and ctx.user_id:
        order_request = await order_requests.find_for_supplier(request_uuid, ctx.user_id)

    if order_request is None:
        raise NotFound("Order request not found or you are not authorized to modify it.")

    if order_request.status != RequestStatus.PENDING.value:
        raise InvalidTransition(
            f"Order request already {order_request.status}. Cannot change a non-pending request."
        )

    await order_requests.update(order_request, status=new_status)
    await db.commit()

    logger.info(f"Order request {order_request.id} marked {new_status} by supplier {ctx.user_id}")
    return order_request


async def list_for_supplier(db: AsyncSession, supplier_id: str) -> List[Dict[str, Any]]:
    """Supplier dashboard: incoming requests, newest first, with the vendor's public fields"""
    requests = await OrderRequestRepository(db).list_by_supplier(supplier_id)
    vendors = await UserRepository(db).find_by_ids(r.vendor_id for r in requests)

    result = []
    for order_request in requests:
        data = order_request_to_dict(order_request)
        data["vendor"] = user_public_to_dict(vendors.get(order_request.vendor_id))
        result.append(data)
    return result


async def list_for_vendor(db: AsyncSession, vendor_id: str) -> List[Dict[str, Any]]:
    """Vendor history: own requests, newest first, with the supplier's public fields"""
    requests = await OrderRequestRepository(db).list_by_vendor(vendor_id)
    suppliers = await UserRepository(db).find_by_ids(r.supplier_id for r in requests)

    result = []
    for order_request in requests:
        data = order_request_to_dict(order_request)
        data["supplier"] = user_public_to_dict(suppliers.get(order_request.supplier_id))
        result.append(data)
    return result
