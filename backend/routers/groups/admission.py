"""
Group admission: the capacity-checked acceptance of a join request.

Joins on one group are serialized inside this process by a per-group lock,
so the checks below see the state they will write against. Across processes
the store guards the same rules: the conditional UPDATE in
GroupRepository.increment_joined_if_capacity keeps joined_quantity within
total_quantity, and the partial unique index on join_requests allows one
active request per user and group. Both run in the transaction that inserts
the JoinRequest.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from typing import Optional
from dependencies.rbac import RequestContext, ensure_permission
from repositories import GroupRepository, JoinRequestRepository
from utils.errors import ValidationError, NotFound, CapacityExceeded, SelfJoinError, DuplicateRequest
from utils.response_helpers import parse_uuid
import asyncio
import logging
import uuid
import weakref

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "You already have an active join request for this group."

# Entries disappear once no join on the group holds or awaits the lock
_group_locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = weakref.WeakValueDictionary()


def group_lock(group_id: uuid.UUID) -> asyncio.Lock:
    lock = _group_locks.get(group_id)
    if lock is None:
        lock = asyncio.Lock()
        _group_locks[group_id] = lock
    return lock


def capacity_message(quantity: int, total_quantity: int) -> str:
    return f"Joining {quantity} kg would exceed the group's total quantity of {total_quantity} kg."


async def join_group(
    db: AsyncSession,
    group_id: str,
    ctx: RequestContext,
    quantity: Optional[int]
) -> str:
    """
    Admit the caller into a group with the given quantity.

    Returns the group's product name. Raises RoleError, ValidationError,
    NotFound, CapacityExceeded, SelfJoinError or DuplicateRequest.
    """
    ensure_permission(ctx, "join-requests")

    if not ctx.user_id:
        raise ValidationError("userId is required.")
    if quantity is None:
        raise ValidationError("Quantity is required.")

    group_uuid = parse_uuid(group_id)
    if group_uuid is None:
        raise ValidationError("Invalid group id.")

    lock = group_lock(group_uuid)
    async with lock:
        return await _admit(db, group_uuid, ctx.user_id, quantity)


async def _admit(db: AsyncSession, group_uuid: uuid.UUID, user_id: str, quantity: int) -> str:
    groups = GroupRepository(db)
    join_requests = JoinRequestRepository(db)

    group = await groups.find_by_id(group_uuid, refresh=True)
    if group is None:
        raise NotFound("Group not found.")

    # rollback expires the instance, keep what the messages need
    product = group.product
    total_quantity = group.total_quantity

    if quantity < group.min_join_quantity:
        raise ValidationError(f"Quantity must be at least {group.min_join_quantity} kg.")

    if group.joined_quantity + quantity > total_quantity:
        raise CapacityExceeded(capacity_message(quantity, total_quantity))

    if group.creator_id == user_id:
        raise SelfJoinError("You cannot join a group you created.")

    if await join_requests.find_active(group_uuid, user_id):
        raise DuplicateRequest(DUPLICATE_MESSAGE)

    try:
        if not await groups.increment_joined_if_capacity(group_uuid, quantity):
            # another process took the remaining capacity after our read
            logger.warning(f"Join of {quantity} kg to group {group_uuid} lost the capacity race")
            raise CapacityExceeded(capacity_message(quantity, total_quantity))

        await join_requests.create(group_uuid, user_id, quantity)
        await db.commit()

    except CapacityExceeded:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Concurrent duplicate join by {user_id} on group {group_uuid}")
        raise DuplicateRequest(DUPLICATE_MESSAGE)

    logger.info(f"User {user_id} joined group {group_uuid} with {quantity} kg")
    return product
