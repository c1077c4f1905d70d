"""Artwork listing model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artmarket.models.base import Base

if TYPE_CHECKING:
    from artmarket.models.commerce import Order
    from artmarket.models.message import Message
    from artmarket.models.profile import Profile

ARTWORK_STYLES = ("abstract", "realism", "minimalist", "popart", "other")
ARTWORK_STATUSES = ("pending", "approved", "rejected")


class Artwork(Base):
    __tablename__ = "artworks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), default=Decimal("0"), nullable=False
    )
    image_path: Mapped[str] = mapped_column(String(500), nullable=False)
    style: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False
    )
    sold: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_artwork_price_positive"),
        CheckConstraint("shipping_cost >= 0", name="ck_artwork_shipping_nonneg"),
        CheckConstraint(
            "style IN ('abstract', 'realism', 'minimalist', 'popart', 'other')",
            name="ck_artwork_style",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_artwork_status",
        ),
    )

    artist: Mapped[Profile] = relationship(back_populates="artworks")
    messages: Mapped[list[Message]] = relationship(back_populates="artwork")
    orders: Mapped[list[Order]] = relationship(back_populates="artwork")
