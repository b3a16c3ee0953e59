import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, JSON, String, Text, Uuid
from videodiary.core.database import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), index=True, nullable=False)

    mood = Column(String, nullable=False)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD, user-local

    # Video platform references
    mux_upload_id = Column(String, unique=True, index=True, nullable=False)
    mux_asset_id = Column(String, unique=True, index=True, nullable=True)
    mux_playback_id = Column(String, nullable=True)
    mux_track_id = Column(String, nullable=True)

    video_status = Column(String, nullable=False, default="uploading")  # uploading, processing, ready, error
    thumbnail_url = Column(String, nullable=True)
    duration = Column(Integer, nullable=True)

    transcript = Column(Text, nullable=True)
    ai_analysis = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
