from pydantic import Field
from typing import Optional
from datetime import datetime
from utils.response_helpers import CamelModel


class OrderRequestCreate(CamelModel):
    # Presence is checked by the workflow, after the role check
    supplier_id: Optional[str] = None
    product_id: Optional[str] = Field(default=None, max_length=200)
    quantity: Optional[int] = None
    notes: Optional[str] = None

    user_id: Optional[str] = None
    user_role: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    status: Optional[str] = None
    user_id: Optional[str] = None
    user_role: Optional[str] = None


class CounterpartResponse(CamelModel):
    """Public fields of the other side of an order request"""
    id: str
    name: str
    location: str


class OrderRequestResponse(CamelModel):
    id: str
    vendor_id: str
    supplier_id: str
    product_id: str
    quantity: int
    notes: str
    status: str
    created_at: datetime
    updated_at: datetime


class SupplierOrderRequestResponse(OrderRequestResponse):
    vendor: Optional[CounterpartResponse] = None


class VendorOrderRequestResponse(OrderRequestResponse):
    supplier: Optional[CounterpartResponse] = None


class OrderRequestEnvelope(CamelModel):
    message: str
    request: OrderRequestResponse
