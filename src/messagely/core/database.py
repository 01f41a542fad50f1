from sqlalchemy import ForeignKey, String, Text, DateTime, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, the form DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), primary_key=True)
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    phone: Mapped[str] = mapped_column(String(30))
    join_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    sent_messages: Mapped[List["Message"]] = relationship(
        "Message",
        foreign_keys="Message.from_username",
        back_populates="from_user"
    )
    received_messages: Mapped[List["Message"]] = relationship(
        "Message",
        foreign_keys="Message.to_username",
        back_populates="to_user"
    )

class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_from_sent_at', 'from_username', 'sent_at'),
        Index('ix_messages_to_sent_at', 'to_username', 'sent_at'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    from_username: Mapped[str] = mapped_column(ForeignKey("users.username"))
    to_username: Mapped[str] = mapped_column(ForeignKey("users.username"))
    body: Mapped[str] = mapped_column(Text)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    from_user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[from_username],
        back_populates="sent_messages"
    )
    to_user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[to_username],
        back_populates="received_messages"
    )
