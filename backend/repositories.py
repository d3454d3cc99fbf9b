"""
Data access for marketplace entities.

Each repository wraps one table with explicit create / update / find
operations. Repositories flush but never commit; the caller owns the
transaction.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from models import (
    User, Group, JoinRequest, OrderRequest, ChatMessage,
    UserRole, ACTIVE_JOIN_STATUSES, utcnow
)
from typing import List, Optional, Dict, Iterable
import uuid


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    async def create(self, user_id: str, name: str, email: str, role: str, location: str) -> User:
        user = User(id=user_id, name=name, email=email, role=role, location=location)
        self.db.add(user)
        await self.db.flush()
        return user

    async def update(self, user: User, **fields) -> User:
        for field, value in fields.items():
            setattr(user, field, value)
        await self.db.flush()
        return user

    async def list_suppliers(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.SUPPLIER.value)
            .order_by(User.name)
        )
        return list(result.scalars().all())


class GroupRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, group_id: uuid.UUID, refresh: bool = False) -> Optional[Group]:
        """refresh=True overwrites an instance already in the session with stored values"""
        return await self.db.get(Group, group_id, populate_existing=refresh)

    async def create(self, **fields) -> Group:
        group = Group(**fields)
        self.db.add(group)
        await self.db.flush()
        return group

    async def list_all(self) -> List[Group]:
        result = await self.db.execute(select(Group).order_by(Group.created_at.desc()))
        return list(result.scalars().all())

    async def list_by_creator(self, creator_id: str) -> List[Group]:
        result = await self.db.execute(
            select(Group)
            .where(Group.creator_id == creator_id)
            .order_by(Group.created_at.desc())
        )
        return list(result.scalars().all())

    async def increment_joined_if_capacity(self, group_id: uuid.UUID, quantity: int) -> bool:
        """
        Add quantity to joined_quantity in one conditional UPDATE.
        Returns False, changing nothing, when the result would pass total_quantity.
        """
        result = await self.db.execute(
            update(Group)
            .where(
                and_(
                    Group.id == group_id,
                    Group.joined_quantity + quantity <= Group.total_quantity
                )
            )
            .values(
                joined_quantity=Group.joined_quantity + quantity,
                updated_at=utcnow()
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class JoinRequestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_active(self, group_id: uuid.UUID, user_id: str) -> Optional[JoinRequest]:
        result = await self.db.execute(
            select(JoinRequest).where(
                and_(
                    JoinRequest.group_id == group_id,
                    JoinRequest.user_id == user_id,
                    JoinRequest.status.in_(ACTIVE_JOIN_STATUSES)
                )
            )
        )
        return result.scalars().first()

    async def create(self, group_id: uuid.UUID, user_id: str, quantity: int) -> JoinRequest:
        join_request = JoinRequest(group_id=group_id, user_id=user_id, quantity=quantity)
        self.db.add(join_request)
        await self.db.flush()
        return join_request


class OrderRequestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_for_supplier(self, request_id: uuid.UUID, supplier_id: str) -> Optional[OrderRequest]:
        result = await self.db.execute(
            select(OrderRequest).where(
                and_(
                    OrderRequest.id == request_id,
                    OrderRequest.supplier_id == supplier_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def create(self, **fields) -> OrderRequest:
        order_request = OrderRequest(**fields)
        self.db.add(order_request)
        await self.db.flush()
        return order_request

    async def update(self, order_request: OrderRequest, **fields) -> OrderRequest:
        for field, value in fields.items():
            setattr(order_request, field, value)
        order_request.updated_at = utcnow()
        await self.db.flush()
        return order_request

    async def list_by_supplier(self, supplier_id: str) -> List[OrderRequest]:
        result = await self.db.execute(
            select(OrderRequest)
            .where(OrderRequest.supplier_id == supplier_id)
            .order_by(OrderRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_vendor(self, vendor_id: str) -> List[OrderRequest]:
        result = await self.db.execute(
            select(OrderRequest)
            .where(OrderRequest.vendor_id == vendor_id)
            .order_by(OrderRequest.created_at.desc())
        )
        return list(result.scalars().all())


class ChatMessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, group_id: uuid.UUID, sender_id: str, sender_name: str, message: str) -> ChatMessage:
        chat_message = ChatMessage(
            group_id=group_id,
            sender_id=sender_id,
            sender_name=sender_name,
            message=message
        )
        self.db.add(chat_message)
        await self.db.flush()
        return chat_message

    async def recent_for_group(self, group_id: uuid.UUID, limit: int) -> List[ChatMessage]:
        """Latest `limit` messages of a group, oldest first"""
        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.group_id == group_id)
            .order_by(ChatMessage.id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))
