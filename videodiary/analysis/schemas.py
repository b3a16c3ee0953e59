from typing import List
from pydantic import BaseModel, Field


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True


class AIAnalysis(BaseSchema):
    title: str
    summary: str
    emotional_analysis: str = ""
    key_topics: List[str] = []
    advice: str = ""
    sentiment_score: float = Field(ge=0, le=100)
