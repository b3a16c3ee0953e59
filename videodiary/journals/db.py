import datetime
from uuid import UUID, uuid4
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session
from videodiary.journals.models import JournalEntry
from videodiary.ingestion.transitions import ALLOWED_FROM


# Helper
def get_entry_date(date: Optional[str]) -> str:
    return date or str(datetime.date.today())


# Lookups
def get_entry(db: Session, entry_id: UUID, user_id: UUID) -> Optional[JournalEntry]:
    return db.query(JournalEntry).filter(
        JournalEntry.id == entry_id,
        JournalEntry.user_id == user_id
    ).first()

def get_entry_by_upload_id(db: Session, upload_id: str) -> Optional[JournalEntry]:
    return db.query(JournalEntry).filter(JournalEntry.mux_upload_id == upload_id).first()

def get_entry_by_asset_id(db: Session, asset_id: str) -> Optional[JournalEntry]:
    return db.query(JournalEntry).filter(JournalEntry.mux_asset_id == asset_id).first()

def get_user_entries(db: Session, user_id: UUID, skip: int = 0, limit: int = 100) -> List[JournalEntry]:
    return db.query(JournalEntry).filter(
        JournalEntry.user_id == user_id
    ).order_by(
        JournalEntry.date.desc(), JournalEntry.created_at.desc()
    ).offset(skip).limit(limit).all()


# Create / delete
def create_entry(db: Session, user_id: UUID, mood: str, upload_id: str, date: Optional[str] = None) -> JournalEntry:
    new_entry = JournalEntry(
        id=uuid4(),
        user_id=user_id,
        mood=mood,
        date=get_entry_date(date),
        mux_upload_id=upload_id,
        video_status="uploading",
        created_at=datetime.datetime.utcnow(),
    )
    db.add(new_entry)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(new_entry)
    return new_entry

def delete_entry(db: Session, entry_id: UUID, user_id: UUID) -> Optional[JournalEntry]:
    entry = get_entry(db, entry_id, user_id)
    if entry:
        db.delete(entry)
        db.commit()
        return entry
    return None

def set_ai_analysis(db: Session, entry: JournalEntry, analysis: Dict[str, Any]) -> JournalEntry:
    db.query(JournalEntry).filter(
        JournalEntry.id == entry.id,
        JournalEntry.user_id == entry.user_id,
    ).update({"ai_analysis": analysis}, synchronize_session=False)
    db.commit()
    db.refresh(entry)
    return entry


# Targeted, guarded updates
def apply_entry_changes(
    db: Session,
    entry: JournalEntry,
    changes: Dict[str, Any],
    user_id: Optional[UUID] = None,
) -> int:
    """
    Writes only the changed columns, keyed by the entry's join key
    (asset id once linked, upload id before) and optionally by owner.

    Guards in the WHERE clause keep each column moving forward only:
    the asset id is set only while still empty, and a status change
    only applies from an allowed predecessor. A concurrent writer that
    got there first turns this into a no-op. Returns the matched row
    count and reloads `entry` from the database.
    """
    if not changes:
        return 0

    query = db.query(JournalEntry)
    if entry.mux_asset_id and "mux_asset_id" not in changes:
        query = query.filter(JournalEntry.mux_asset_id == entry.mux_asset_id)
    else:
        query = query.filter(JournalEntry.mux_upload_id == entry.mux_upload_id)

    if user_id is not None:
        query = query.filter(JournalEntry.user_id == user_id)
    if "mux_asset_id" in changes:
        query = query.filter(JournalEntry.mux_asset_id.is_(None))
    if "video_status" in changes:
        query = query.filter(JournalEntry.video_status.in_(ALLOWED_FROM[changes["video_status"]]))

    try:
        updated = query.update(changes, synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(entry)
    return updated
