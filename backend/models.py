from sqlalchemy import (
    String,
    Text,
    DateTime,
    CheckConstraint,
    Index,
    ForeignKey,
    Float,
    Integer,
    Uuid,
    text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, declarative_base
from datetime import datetime, timezone
from typing import List
from enum import Enum
import uuid

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    VENDOR = "vendor"
    SUPPLIER = "supplier"


class GroupStatus(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"
    COMPLETED = "Completed"


class RequestStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"


ACTIVE_JOIN_STATUSES = (RequestStatus.PENDING.value, RequestStatus.ACCEPTED.value)
_ACTIVE_JOIN_WHERE = text("status IN ('Pending', 'Accepted')")


class User(Base):
    """
    Marketplace participant, keyed by an identifier generated on the client.
    There is no credential: whoever presents the id is the user.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('vendor', 'supplier')", name="users_role_check"),
        Index("users_role_idx", "role"),
    )

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    location: Mapped[str] = mapped_column(String(200), default="Unknown", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)


class Group(Base):
    """
    Bulk-purchase pool created by a vendor.
    joined_quantity is only ever changed through the admission engine.
    """
    __tablename__ = "groups"
    __table_args__ = (
        CheckConstraint("price > 0", name="groups_price_check"),
        CheckConstraint("total_quantity >= 1", name="groups_total_quantity_check"),
        CheckConstraint("min_join_quantity >= 1", name="groups_min_join_quantity_check"),
        CheckConstraint(
            "joined_quantity >= 0 AND joined_quantity <= total_quantity",
            name="groups_capacity_check",
        ),
        Index("groups_creator_id_idx", "creator_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[str] = mapped_column(String(100), nullable=False)

    product: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    min_join_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    joined_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pickup_point: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default=GroupStatus.OPEN.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, nullable=False)

    join_requests: Mapped[List["JoinRequest"]] = relationship(
        "JoinRequest",
        back_populates="group",
        cascade="all, delete-orphan"
    )


class JoinRequest(Base):
    """A vendor's claim on part of a group's capacity"""
    __tablename__ = "join_requests"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="join_requests_quantity_check"),
        # one active (Pending/Accepted) request per user and group
        Index(
            "join_requests_active_uq",
            "group_id",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_JOIN_WHERE,
            sqlite_where=_ACTIVE_JOIN_WHERE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=RequestStatus.PENDING.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)

    group: Mapped["Group"] = relationship("Group", back_populates="join_requests")


class OrderRequest(Base):
    """Direct vendor-to-supplier purchase proposal"""
    __tablename__ = "order_requests"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="order_requests_quantity_check"),
        Index("order_requests_supplier_id_idx", "supplier_id", "created_at"),
        Index("order_requests_vendor_id_idx", "vendor_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_id: Mapped[str] = mapped_column(String(100), nullable=False)
    supplier_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Either a product name or an id from the supplier's catalog
    product_id: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    status: Mapped[str] = mapped_column(String(20), default=RequestStatus.PENDING.value, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, nullable=False)


class ChatMessage(Base):
    """
    Append-only group chat log.
    The integer id is assigned on insert and defines the room's message order.
    """
    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("chat_messages_group_id_idx", "group_id", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False
    )
    sender_id: Mapped[str] = mapped_column(String(100), nullable=False)
    sender_name: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)
