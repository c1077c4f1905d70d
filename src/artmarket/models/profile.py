"""Profile model -- one row per authenticated identity."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artmarket.models.base import Base

if TYPE_CHECKING:
    from artmarket.models.artwork import Artwork


class Profile(Base):
    __tablename__ = "profiles"

    # Shared with the auth provider's subject id, never generated here.
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    username: Mapped[Optional[str]] = mapped_column(
        String(40), unique=True, nullable=True
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="artist", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("role IN ('artist', 'buyer')", name="ck_profile_role"),
    )

    artworks: Mapped[list[Artwork]] = relationship(
        back_populates="artist", lazy="selectin"
    )
