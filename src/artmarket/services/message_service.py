"""Buyer/artist messaging: inbox threads, thread history, and sending."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SendMessageRequest(BaseModel):
    content: str = Field(..., max_length=5000)


class MessageResponse(BaseModel):
    id: uuid.UUID
    artwork_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    content: str
    created_at: datetime


class ThreadSummary(BaseModel):
    artwork_id: uuid.UUID
    other_user_id: uuid.UUID
    latest_message: str
    updated_at: datetime
    artwork_title: str
    other_username: str


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------

# One joined round trip; rows arrive newest first so the first row seen for
# a thread key is its latest message.
_INBOX_QUERY = """
SELECT m.artwork_id, m.sender_id, m.receiver_id, m.content, m.created_at,
       a.title, sp.username, rp.username
  FROM messages m
  LEFT JOIN artworks a ON a.id = m.artwork_id
  LEFT JOIN profiles sp ON sp.id = m.sender_id
  LEFT JOIN profiles rp ON rp.id = m.receiver_id
 WHERE m.sender_id = :user_id
    OR m.receiver_id = :user_id
    OR a.artist_id = :user_id
 ORDER BY m.created_at DESC
"""


def collapse_threads(rows, user_id: uuid.UUID) -> list[ThreadSummary]:
    """Reduce newest-first message rows to one summary per (artwork, counterpart).

    Row layout: artwork_id, sender_id, receiver_id, content, created_at,
    artwork_title, sender_username, receiver_username.
    """
    threads: dict[tuple[uuid.UUID, uuid.UUID], ThreadSummary] = {}
    for row in rows:
        artwork_id, sender_id, receiver_id = row[0], row[1], row[2]
        if sender_id == user_id:
            other_user_id, other_username = receiver_id, row[7]
        else:
            other_user_id, other_username = sender_id, row[6]

        key = (artwork_id, other_user_id)
        if key in threads:
            continue
        threads[key] = ThreadSummary(
            artwork_id=artwork_id,
            other_user_id=other_user_id,
            latest_message=row[3],
            updated_at=row[4],
            artwork_title=row[5] or "Untitled",
            other_username=other_username or "Unknown",
        )
    return list(threads.values())


async def list_inbox(db: AsyncSession, user_id: uuid.UUID) -> list[ThreadSummary]:
    """Return the caller's conversation threads, most recently active first."""
    result = await db.execute(text(_INBOX_QUERY), {"user_id": user_id})
    return collapse_threads(result.fetchall(), user_id)


# ---------------------------------------------------------------------------
# Threads
# ---------------------------------------------------------------------------

async def list_thread(
    db: AsyncSession,
    user_id: uuid.UUID,
    artwork_id: uuid.UUID,
    other_user_id: uuid.UUID,
) -> list[MessageResponse]:
    """Messages between the caller and one counterpart about one artwork, oldest first."""
    result = await db.execute(
        text(
            "SELECT id, artwork_id, sender_id, receiver_id, content, created_at "
            "FROM messages "
            "WHERE artwork_id = :artwork_id "
            "AND ((sender_id = :user_id AND receiver_id = :other_id) "
            "  OR (sender_id = :other_id AND receiver_id = :user_id)) "
            "ORDER BY created_at ASC"
        ),
        {"artwork_id": artwork_id, "user_id": user_id, "other_id": other_user_id},
    )
    return [
        MessageResponse(
            id=r[0],
            artwork_id=r[1],
            sender_id=r[2],
            receiver_id=r[3],
            content=r[4],
            created_at=r[5],
        )
        for r in result.fetchall()
    ]


async def insert_message(
    db: AsyncSession,
    artwork_id: uuid.UUID,
    sender_id: uuid.UUID,
    receiver_id: uuid.UUID,
    content: str,
) -> uuid.UUID:
    """Append a message row. Returns the new message id."""
    message_id = uuid.uuid4()
    await db.execute(
        text(
            "INSERT INTO messages "
            "(id, artwork_id, sender_id, receiver_id, content, created_at) "
            "VALUES (:id, :artwork_id, :sender_id, :receiver_id, :content, :created_at)"
        ),
        {
            "id": message_id,
            "artwork_id": artwork_id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "content": content,
            "created_at": datetime.now(timezone.utc),
        },
    )
    return message_id


async def send_message(
    db: AsyncSession,
    sender_id: uuid.UUID,
    artwork_id: uuid.UUID,
    receiver_id: uuid.UUID,
    content: str,
) -> uuid.UUID:
    """Validate and send a free-text message within a thread."""
    content = content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    if receiver_id == sender_id:
        raise HTTPException(status_code=400, detail="Cannot message yourself")

    result = await db.execute(
        text("SELECT 1 FROM artworks WHERE id = :artwork_id"),
        {"artwork_id": artwork_id},
    )
    if result.fetchone() is None:
        raise HTTPException(status_code=404, detail="Artwork not found")

    return await insert_message(db, artwork_id, sender_id, receiver_id, content)
