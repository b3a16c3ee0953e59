from uuid import UUID
from typing import List, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from videodiary.auth.service import get_current_user_id
from videodiary.core.database import get_db
from videodiary.journals.schemas import InsightsOut, JournalEntryBase
from videodiary.journals.db import delete_entry, get_entry, get_user_entries
from videodiary.journals.service import build_insights

router = APIRouter(prefix="/entries", tags=["Entries"])
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=List[JournalEntryBase],
    summary="Get all diary entries",
    description="Retrieve a paginated list of the authenticated user's entries, newest date first.",
    responses={
        200: {"description": "Entries retrieved successfully."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to retrieve entries."},
    },
)
def get_entries_route(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> List[JournalEntryBase]:
    try:
        return get_user_entries(db, user_id, skip, limit)
    except Exception as e:
        logger.error(f"Error fetching entries for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch diary entries")


@router.get(
    "/insights",
    response_model=InsightsOut,
    summary="Get diary insights",
    description="Streak, mood distribution and recurring topics across the user's entries.",
    responses={
        200: {"description": "Insights computed successfully."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to compute insights."},
    },
)
def get_insights_route(
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> InsightsOut:
    try:
        entries = get_user_entries(db, user_id, 0, None)
        return build_insights(entries)
    except Exception as e:
        logger.error(f"Error computing insights for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute insights")


@router.get(
    "/{entry_id}",
    response_model=JournalEntryBase,
    summary="Get an entry by ID",
    description="Retrieve a specific diary entry by its unique identifier.",
    responses={
        200: {"description": "Entry retrieved successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
        500: {"description": "Failed to retrieve entry."},
    },
)
def read_entry_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> JournalEntryBase:
    try:
        entry = get_entry(db, entry_id, user_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Entry not found")
        return entry
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving entry {entry_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve entry")


@router.delete(
    "/{entry_id}",
    response_model=Dict[str, str],
    summary="Delete an entry by ID",
    description="Delete a diary entry. The video asset on the platform is left in place.",
    responses={
        200: {"description": "Entry deleted successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
        500: {"description": "Failed to delete entry."},
    },
)
def delete_entry_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> Dict[str, str]:
    try:
        deleted = delete_entry(db, entry_id, user_id)
        if deleted is None:
            raise HTTPException(status_code=404, detail="Entry not found")
        return {"detail": "Entry deleted successfully."}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting entry {entry_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete entry")
