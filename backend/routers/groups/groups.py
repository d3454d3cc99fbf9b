from fastapi import APIRouter, Depends, status
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession
from config import get_db
from dependencies.rbac import RequestContext, ensure_permission
from repositories import GroupRepository
from utils.errors import MarketplaceError, ValidationError, StoreError
from utils.response_helpers import safe_model_validate, safe_model_validate_list, group_to_dict
from .schemas import GroupCreate, GroupDetails, GroupResponse, JoinGroupRequest, JoinGroupResponse
from .admission import join_group
from typing import List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Groups"])


def group_details(group_data: GroupCreate) -> GroupDetails:
    """Validate the group fields, reporting the first problem like a request validation error"""
    try:
        return GroupDetails.model_validate(
            group_data.model_dump(exclude={"user_id", "user_role"}, exclude_none=True)
        )
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(to_camel(str(part)) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        raise ValidationError(f"{field}: {message}" if field else message)


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    db: AsyncSession = Depends(get_db)
):
    """Open a new buying group (vendors only)"""
    ctx = RequestContext(user_id=group_data.user_id, user_role=group_data.user_role)
    ensure_permission(ctx, "groups")

    if not ctx.user_id:
        raise ValidationError("userId is required.")

    details = group_details(group_data)

    try:
        group = await GroupRepository(db).create(
            creator_id=ctx.user_id,
            product=details.product,
            price=details.price,
            total_quantity=details.total_quantity,
            min_join_quantity=details.min_join_quantity,
            pickup_point=details.pickup_point,
            joined_quantity=0
        )
        await db.commit()

        logger.info(f"Group {group.id} created by {ctx.user_id} for {group.product}")
        return safe_model_validate(GroupResponse, group_to_dict(group))

    except MarketplaceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating group: {str(e)}")
        raise StoreError("Error creating group", detail=str(e))


@router.get("/groups", response_model=List[GroupResponse])
async def list_groups(db: AsyncSession = Depends(get_db)):
    """All groups, newest first"""
    try:
        groups = await GroupRepository(db).list_all()
        return safe_model_validate_list(GroupResponse, [group_to_dict(g) for g in groups])
    except Exception as e:
        logger.error(f"Error fetching groups: {str(e)}")
        raise StoreError("Error fetching groups", detail=str(e))


@router.get("/groups/my/{user_id}", response_model=List[GroupResponse])
async def list_my_groups(user_id: str, db: AsyncSession = Depends(get_db)):
    """Groups created by the given user"""
    try:
        groups = await GroupRepository(db).list_by_creator(user_id)
        return safe_model_validate_list(GroupResponse, [group_to_dict(g) for g in groups])
    except Exception as e:
        logger.error(f"Error fetching my groups: {str(e)}")
        raise StoreError("Error fetching your groups", detail=str(e))


@router.post("/join-requests/{group_id}/join", response_model=JoinGroupResponse)
async def join_group_request(
    group_id: str,
    join_data: JoinGroupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Claim part of a group's capacity (vendors only, not the creator)"""
    ctx = RequestContext(user_id=join_data.user_id, user_role=join_data.user_role)
    try:
        product = await join_group(db, group_id, ctx, join_data.quantity)
        return JoinGroupResponse(message="Join request submitted successfully.", product=product)

    except MarketplaceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error joining group: {str(e)}")
        raise StoreError("Error joining group", detail=str(e))
