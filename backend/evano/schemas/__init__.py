"""Pydantic schemas."""
from evano.schemas.video import (
    Ad,
    AdCreate,
    AdPlan,
    AdSettingsUpdate,
    CategoryRef,
    CreatorStats,
    HomeFeedResponse,
    Shelf,
    StatusUpdate,
    Video,
    VideoCreate,
)
from evano.schemas.account import (
    AccountResponse,
    MessageResponse,
    UserProfile,
    ViewerSession,
)

__all__ = [
    "Ad",
    "AdCreate",
    "AdPlan",
    "AdSettingsUpdate",
    "CategoryRef",
    "CreatorStats",
    "HomeFeedResponse",
    "Shelf",
    "StatusUpdate",
    "Video",
    "VideoCreate",
    "AccountResponse",
    "MessageResponse",
    "UserProfile",
    "ViewerSession",
]
