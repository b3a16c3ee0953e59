from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from videodiary.analysis.schemas import AIAnalysis
from videodiary.analysis.service import AnalysisError, OpenAIAIService
from videodiary.auth.service import get_current_user_id
from videodiary.core.database import get_db
from videodiary.core.dependency import get_ai_service
from videodiary.journals.db import get_entry, set_ai_analysis

router = APIRouter(prefix="/entries", tags=["Analysis"])
logger = logging.getLogger(__name__)


@router.post(
    "/{entry_id}/analysis",
    response_model=AIAnalysis,
    summary="Analyze an entry",
    description="Summarize the entry's transcript with a language model and store the result on the entry.",
    responses={
        200: {"description": "Analysis stored."},
        400: {"description": "Entry has no transcript yet."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
        502: {"description": "Language model call failed."},
    },
)
def analyze_entry_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    ai: OpenAIAIService = Depends(get_ai_service),
    user_id: UUID = Security(get_current_user_id),
) -> AIAnalysis:
    try:
        entry = get_entry(db, entry_id, user_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Entry not found")
        if not entry.transcript:
            raise HTTPException(status_code=400, detail="No transcript available for this entry")

        logger.info(f"Analyzing entry {entry_id}")
        analysis = ai.analyze_video_entry(entry.transcript, entry.mood)
        set_ai_analysis(db, entry, analysis.model_dump())
        return analysis
    except HTTPException:
        raise
    except AnalysisError as e:
        logger.error(f"Analysis failed for entry {entry_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to analyze entry")
    except Exception as e:
        logger.error(f"Error analyzing entry {entry_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save analysis")
