from pydantic import Field, model_validator
from typing import Optional
from datetime import datetime
from utils.response_helpers import CamelModel


class GroupCreate(CamelModel):
    # Shape and ranges are checked by GroupDetails, after the role check
    product: Optional[str] = None
    price: Optional[float] = None
    total_quantity: Optional[int] = None
    min_join_quantity: Optional[int] = None
    pickup_point: Optional[str] = None

    # Declared identity of the caller
    user_id: Optional[str] = None
    user_role: Optional[str] = None


class GroupDetails(CamelModel):
    product: str = Field(min_length=1, max_length=200)
    price: float = Field(gt=0, description="Price per kg")
    total_quantity: int = Field(ge=1, description="Quantity ceiling of the pool, in kg")
    min_join_quantity: int = Field(ge=1, description="Smallest quantity a vendor may join with, in kg")
    pickup_point: str = Field(min_length=1, max_length=255)

    @model_validator(mode="after")
    def check_quantities(self):
        if self.min_join_quantity > self.total_quantity:
            raise ValueError("minJoinQuantity cannot exceed totalQuantity")
        self.product = self.product.strip()
        self.pickup_point = self.pickup_point.strip()
        return self


class GroupResponse(CamelModel):
    id: str
    creator_id: str
    product: str
    price: float
    total_quantity: int
    min_join_quantity: int
    joined_quantity: int
    pickup_point: str
    status: str
    created_at: datetime
    updated_at: datetime


class JoinGroupRequest(CamelModel):
    quantity: Optional[int] = None
    user_id: Optional[str] = None
    user_role: Optional[str] = None


class JoinGroupResponse(CamelModel):
    message: str
    product: str
