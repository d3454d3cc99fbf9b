from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db
from repositories import UserRepository
from utils.errors import MarketplaceError, StoreError
from utils.response_helpers import safe_model_validate, safe_model_validate_list, user_to_dict, user_public_to_dict
from .schemas import IdentifyRequest, IdentifyResponse, UserResponse, SupplierResponse
from .helpers import user_helpers
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post("/user/identify", response_model=IdentifyResponse, status_code=status.HTTP_201_CREATED)
async def identify_user(
    payload: IdentifyRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Register or refresh the client-side identity.

    Returns 201 when the user is new and 200 when an existing profile was updated.
    """
    try:
        user, created = await user_helpers.identify(db, payload)

        if not created:
            response.status_code = status.HTTP_200_OK

        return IdentifyResponse(
            message="User profile created." if created else "User profile updated.",
            user=safe_model_validate(UserResponse, user_to_dict(user))
        )

    except MarketplaceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error identifying user: {str(e)}")
        raise StoreError("Server error during user identification", detail=str(e))


@router.get("/suppliers", response_model=List[SupplierResponse])
async def list_suppliers(db: AsyncSession = Depends(get_db)):
    """All users with the supplier role, for vendors to browse"""
    try:
        suppliers = await UserRepository(db).list_suppliers()
        return safe_model_validate_list(
            SupplierResponse,
            [user_public_to_dict(supplier) for supplier in suppliers]
        )
    except Exception as e:
        logger.error(f"Error fetching suppliers: {str(e)}")
        raise StoreError("Failed to fetch suppliers", detail=str(e))
