"""Video, ad and home feed schemas."""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

VideoStatus = Literal["pending", "approved", "rejected"]
AdType = Literal["video", "banner"]


class CategoryRef(BaseModel):
    """A video's category, resolved from either a text label or a category id."""
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str = "Other"


class Video(BaseModel):
    """A catalog video as served to the pages."""
    id: str
    title: str
    description: str = ""
    video_url: str = ""
    thumbnail_url: str = ""
    category: CategoryRef = Field(default_factory=CategoryRef)
    status: VideoStatus = "pending"
    created_at: str = ""
    views: int = 0
    created_by: Optional[str] = None
    ads_enabled: bool = True
    preroll_ad_id: Optional[str] = None
    is_featured: bool = False
    duration_seconds: Optional[int] = None
    resolution: Optional[str] = None


class VideoCreate(BaseModel):
    """Creator upload metadata. The media files are already in storage."""
    title: str
    description: str = ""
    category: str
    video_url: str
    thumbnail_url: str


class StatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]


class AdSettingsUpdate(BaseModel):
    ads_enabled: Optional[bool] = None
    preroll_ad_id: Optional[str] = None
    clear_preroll: bool = False


class Ad(BaseModel):
    id: str
    title: str
    type: AdType
    url: str
    created_at: str = ""


class AdCreate(BaseModel):
    title: str
    type: AdType
    url: str


class AdPlan(BaseModel):
    """Which ads a viewer sees while watching one video, and when."""
    preroll: Optional[Ad] = None
    banner: Optional[Ad] = None
    banner_delay: float = 0
    lower_third: Optional[Ad] = None
    lower_third_min_interval: float = 0
    lower_third_max_interval: float = 0
    lower_third_visible: float = 0

    @property
    def has_ads(self) -> bool:
        return any((self.preroll, self.banner, self.lower_third))


class Shelf(BaseModel):
    """A named row of videos on the home page."""
    title: str
    items: List[Video]


class HomeFeedResponse(BaseModel):
    hero: Optional[Video] = None
    shelves: List[Shelf] = []


class CreatorStats(BaseModel):
    total_videos: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_views: int = 0
