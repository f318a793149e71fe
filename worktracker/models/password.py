"""Password vault ORM model: one stored credential per row."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from worktracker.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class PasswordEntry(Base):
    __tablename__ = "password_entries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    title: Mapped[str] = mapped_column(String(100))
    website: Mapped[str] = mapped_column(String(200), default="")
    username: Mapped[str] = mapped_column(String(100), default="")
    email: Mapped[str] = mapped_column(String(100), default="")
    password: Mapped[str] = mapped_column(Text)  # iv:ciphertext envelope, or legacy plaintext
    category: Mapped[str] = mapped_column(String(32), default="Other")
    notes: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    strength: Mapped[str] = mapped_column(String(16), default="Medium")
    last_modified: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )
