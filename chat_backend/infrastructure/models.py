# chat_backend/infrastructure/models.py
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_backend.domain.entities import MessageType
from chat_backend.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


chat_participants = Table(
    "chat_participants",
    Base.metadata,
    Column("chat_id", Integer, ForeignKey("chats.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True, index=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(50))
    avatar: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    hashed_password: Mapped[str] = mapped_column(String)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    last_seen: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Chat(Base):
    __tablename__ = "chats"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_group_chat: Mapped[bool] = mapped_column(Boolean, default=False)
    admin_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    last_message_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("messages.id", use_alter=True, name="fk_chats_last_message_id"),
        nullable=True,
    )
    # "<low>:<high>" participant ids of a one-on-one chat
    direct_key: Mapped[Optional[str]] = mapped_column(
        String, unique=True, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, index=True
    )

    participants: Mapped[List[User]] = relationship(
        "User", secondary=chat_participants, lazy="selectin", order_by="User.id"
    )
    last_message: Mapped[Optional["Message"]] = relationship(
        "Message", foreign_keys=[last_message_id], lazy="selectin"
    )

    @property
    def participant_ids(self) -> list[int]:
        return [user.id for user in self.participants]


class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_chat_created", "chat_id", "created_at"),
        Index("ix_messages_chat_deleted", "chat_id", "is_deleted"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, index=True, autoincrement=True
    )
    chat_id: Mapped[int] = mapped_column(Integer, ForeignKey("chats.id"), index=True)
    sender_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    message_type: Mapped[str] = mapped_column(String(10), default=MessageType.TEXT.value)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    file_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    sender: Mapped[User] = relationship("User", lazy="selectin")
    reads: Mapped[List["MessageRead"]] = relationship(
        "MessageRead",
        lazy="selectin",
        order_by=lambda: [MessageRead.read_at, MessageRead.user_id],
    )

    @property
    def read_by(self) -> list[int]:
        return [read.user_id for read in self.reads]


class MessageRead(Base):
    __tablename__ = "message_reads"

    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True, index=True
    )
    read_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
