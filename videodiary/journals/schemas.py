import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True


class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    ANXIOUS = "anxious"
    EXCITED = "excited"
    CALM = "calm"
    STRESSED = "stressed"
    GRATEFUL = "grateful"
    REFLECTIVE = "reflective"


class VideoStatus(str, Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class JournalEntryBase(BaseSchema):
    id: UUID
    user_id: UUID
    mood: Mood
    date: str
    mux_upload_id: str
    mux_asset_id: Optional[str] = None
    mux_playback_id: Optional[str] = None
    mux_track_id: Optional[str] = None
    video_status: VideoStatus
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    transcript: Optional[str] = None
    ai_analysis: Optional[Dict[str, Any]] = None
    created_at: datetime.datetime


class VideoUploadCreate(BaseSchema):
    mood: Mood
    date: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            datetime.date.fromisoformat(value)
        except ValueError:
            raise ValueError("date must be formatted as YYYY-MM-DD")
        return value


class VideoUploadOut(BaseSchema):
    upload_url: str = Field(alias="uploadUrl")
    upload_id: str = Field(alias="uploadId")
    entry_id: UUID = Field(alias="entryId")


class VideoStatusOut(BaseSchema):
    status: VideoStatus
    playback_id: Optional[str] = Field(default=None, alias="playbackId")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[int] = None


class InsightsOut(BaseSchema):
    total_entries: int
    streak: int
    has_entry_today: bool
    mood_stats: Dict[str, int]
    recent_topics: List[str] = []
