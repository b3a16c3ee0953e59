from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        extra = "ignore"


class MuxPlaybackId(BaseSchema):
    id: str
    policy: Optional[str] = None


class MuxTrack(BaseSchema):
    id: str
    type: Optional[str] = None
    text_source: Optional[str] = None
    text_type: Optional[str] = None
    status: Optional[str] = None
    language_code: Optional[str] = None
    name: Optional[str] = None
    asset_id: Optional[str] = None

    @property
    def is_generated_text(self) -> bool:
        """Auto-generated captions only; uploaded subtitle tracks are skipped."""
        return self.type == "text" and self.text_source == "generated_vod"


class MuxAsset(BaseSchema):
    id: str
    status: Optional[str] = None  # preparing, ready, errored
    playback_ids: List[MuxPlaybackId] = []
    duration: Optional[float] = None
    upload_id: Optional[str] = None
    tracks: List[MuxTrack] = []
    errors: Optional[Dict[str, Any]] = None

    @property
    def first_playback_id(self) -> Optional[str]:
        return self.playback_ids[0].id if self.playback_ids else None

    @property
    def rounded_duration(self) -> int:
        return round(self.duration or 0)


class MuxUpload(BaseSchema):
    id: str
    url: Optional[str] = None
    status: Optional[str] = None  # waiting, asset_created, errored, cancelled, timed_out
    asset_id: Optional[str] = None


class MuxWebhookEvent(BaseSchema):
    type: str
    id: Optional[str] = None
    data: Dict[str, Any] = {}
