"""ORM models package -- re-exports all models and the Base class."""

from artmarket.models.base import Base
from artmarket.models.profile import Profile
from artmarket.models.artwork import ARTWORK_STATUSES, ARTWORK_STYLES, Artwork
from artmarket.models.message import Message
from artmarket.models.commerce import Order, ProcessedWebhook

__all__ = [
    "Base",
    "Profile",
    "Artwork",
    "ARTWORK_STYLES",
    "ARTWORK_STATUSES",
    "Message",
    "Order",
    "ProcessedWebhook",
]
