from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from openai import OpenAI, OpenAIError

from videodiary.analysis.prompts import ENTRY_PROMPT
from videodiary.analysis.schemas import AIAnalysis
from videodiary.core.config import OPENAI_CHAT_MODEL

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The completion call failed or returned something unusable."""


class OpenAIAIService:
    """Facade around the OpenAI chat endpoint that speaks Pydantic schemas."""

    def __init__(self, client: OpenAI, model: Optional[str] = None):
        self.client = client
        self.model = model or OPENAI_CHAT_MODEL

    def _chat_json(self, messages: List[dict[str, Any]], *, max_tokens: int = 700) -> dict[str, Any]:
        """Run a chat completion and parse the JSON from the first choice."""
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=0.4,
            response_format={"type": "json_object"},
        )
        return json.loads(resp.choices[0].message.content)

    def analyze_video_entry(self, transcript: str, mood: str) -> AIAnalysis:
        messages = [
            {"role": "system", "content": ENTRY_PROMPT.format(mood=mood)},
            {"role": "user", "content": transcript.strip()},
        ]
        try:
            raw = self._chat_json(messages)
            return AIAnalysis.model_validate(raw)
        except (OpenAIError, ValueError) as e:
            logger.error("Entry analysis failed: %s", e)
            raise AnalysisError(str(e)) from e
