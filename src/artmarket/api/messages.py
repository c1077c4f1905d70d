"""Inbox and message thread endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from artmarket.api.dependencies import get_current_user
from artmarket.database import get_db
from artmarket.models import Profile
from artmarket.services.message_service import (
    MessageResponse,
    SendMessageRequest,
    ThreadSummary,
    list_inbox,
    list_thread,
    send_message,
)

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("/inbox", response_model=list[ThreadSummary])
async def inbox_endpoint(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """One entry per (artwork, counterpart) conversation."""
    return await list_inbox(db, current_user.id)


@router.get("/{artwork_id}/{other_user_id}", response_model=list[MessageResponse])
async def thread_endpoint(
    artwork_id: uuid.UUID,
    other_user_id: uuid.UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_thread(db, current_user.id, artwork_id, other_user_id)


@router.post("/{artwork_id}/{other_user_id}", status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    artwork_id: uuid.UUID,
    other_user_id: uuid.UUID,
    body: SendMessageRequest,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    message_id = await send_message(
        db, current_user.id, artwork_id, other_user_id, body.content,
    )
    await db.commit()
    return {"message_id": str(message_id)}
