# videodiary/core/dependency.py
import logging
from functools import lru_cache
from typing import Optional

from fastapi import HTTPException
from openai import OpenAI

from videodiary.analysis.service import OpenAIAIService
from videodiary.core import config
from videodiary.mux.client import MuxClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _mux() -> MuxClient:
    return MuxClient(
        config.MUX_TOKEN_ID,
        config.MUX_TOKEN_SECRET,
        base_url=config.MUX_API_URL,
        timeout=config.MUX_HTTP_TIMEOUT,
    )

@lru_cache(maxsize=None)
def _chatgpt() -> OpenAIAIService:
    return OpenAIAIService(OpenAI(api_key=config.OPENAI_API_KEY), model=config.OPENAI_CHAT_MODEL)


def get_mux_client() -> MuxClient:
    if not config.MUX_TOKEN_ID or not config.MUX_TOKEN_SECRET:
        logger.error("Missing Mux credentials")
        raise HTTPException(status_code=500, detail="Video platform not configured")
    return _mux()

def get_ai_service() -> OpenAIAIService:
    if not config.OPENAI_API_KEY:
        logger.error("Missing OpenAI API key")
        raise HTTPException(status_code=500, detail="Analysis not available")
    return _chatgpt()

def get_webhook_secret() -> Optional[str]:
    return config.MUX_WEBHOOK_SECRET or None
