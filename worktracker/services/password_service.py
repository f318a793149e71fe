"""Password vault service: encrypted credential store per user.

Plaintext passwords only exist at the API boundary: they are encrypted before
the first write and decrypted when a record is projected for a response.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worktracker.models.password import PasswordEntry
from worktracker.schemas.password import (
    CountBucket,
    PasswordCreate,
    PasswordResponse,
    PasswordStats,
    PasswordUpdate,
)
from worktracker.utils.crypto import VaultCodec
from worktracker.utils.strength import classify_strength

logger = logging.getLogger(__name__)

_EDITABLE = ("title", "website", "username", "email", "category", "notes", "tags")


def to_api_view(entry: PasswordEntry, codec: VaultCodec) -> PasswordResponse:
    """Project a stored entry for the API, revealing the password."""
    return PasswordResponse(
        id=entry.id,
        user_id=entry.user_id,
        title=entry.title,
        website=entry.website,
        username=entry.username,
        email=entry.email,
        decrypted_password=codec.reveal(entry.password, record_id=entry.id),
        category=entry.category,
        notes=entry.notes,
        tags=list(entry.tags or []),
        strength=entry.strength,
        last_modified=entry.last_modified,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


async def list_passwords(
    db: AsyncSession, user_id: str, category: str | None = None
) -> list[PasswordEntry]:
    stmt = (
        select(PasswordEntry)
        .where(PasswordEntry.user_id == user_id)
        .order_by(PasswordEntry.created_at.desc())
    )
    if category and category != "All":
        stmt = stmt.where(PasswordEntry.category == category)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_password(db: AsyncSession, user_id: str, entry_id: str) -> PasswordEntry | None:
    entry = await db.get(PasswordEntry, entry_id)
    if not entry or entry.user_id != user_id:
        return None
    return entry


async def create_password(
    db: AsyncSession, codec: VaultCodec, user_id: str, data: PasswordCreate
) -> PasswordEntry:
    entry = PasswordEntry(
        user_id=user_id,
        title=data.title,
        website=data.website,
        username=data.username,
        email=data.email,
        password=codec.encrypt(data.password),
        category=data.category,
        notes=data.notes,
        tags=list(data.tags),
        strength=classify_strength(data.password).value,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    logger.info("Stored password entry %s for user %s", entry.id, user_id)
    return entry


async def update_password(
    db: AsyncSession,
    codec: VaultCodec,
    user_id: str,
    entry_id: str,
    data: PasswordUpdate,
) -> PasswordEntry | None:
    entry = await get_password(db, user_id, entry_id)
    if not entry:
        return None

    for field in _EDITABLE:
        value = getattr(data, field)
        if value is not None:
            setattr(entry, field, value)

    if data.password is not None:
        # New envelope with a fresh IV; the old one is dropped
        entry.password = codec.encrypt(data.password)
        entry.strength = classify_strength(data.password).value

    entry.last_modified = func.now()

    await db.commit()
    await db.refresh(entry)
    return entry


async def delete_password(db: AsyncSession, user_id: str, entry_id: str) -> bool:
    entry = await get_password(db, user_id, entry_id)
    if not entry:
        return False

    await db.delete(entry)
    await db.commit()
    return True


async def export_passwords(
    db: AsyncSession, codec: VaultCodec, user_id: str
) -> list[PasswordResponse]:
    """Every entry of a user's vault, revealed. Unreadable entries come back masked."""
    entries = await list_passwords(db, user_id)
    return [to_api_view(entry, codec) for entry in entries]


async def _count_by(db: AsyncSession, user_id: str, column) -> list[CountBucket]:
    count = func.count(PasswordEntry.id)
    stmt = (
        select(column, count)
        .where(PasswordEntry.user_id == user_id)
        .group_by(column)
        .order_by(count.desc(), column)
    )
    result = await db.execute(stmt)
    return [CountBucket(name=name, count=n) for name, n in result.all()]


async def password_stats(db: AsyncSession, user_id: str) -> PasswordStats:
    total = await db.scalar(
        select(func.count(PasswordEntry.id)).where(PasswordEntry.user_id == user_id)
    )
    return PasswordStats(
        total_passwords=total or 0,
        category_stats=await _count_by(db, user_id, PasswordEntry.category),
        strength_stats=await _count_by(db, user_id, PasswordEntry.strength),
    )
