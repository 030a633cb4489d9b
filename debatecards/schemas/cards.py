from typing import List
from pydantic import BaseModel, Field


class GenerateCardsRequest(BaseModel):
    topic: str


class DebateCard(BaseModel):
    tagline: str = ""
    evidence: str = Field("", description="Verbatim quote with <mark>/<b>/<u> emphasis markup")
    citation: str = ""
    link: str = ""


class GenerateCardsResponse(BaseModel):
    cards: List[DebateCard]


class ClipboardPayload(BaseModel):
    """Dual-format clipboard content: styled HTML plus a plain-text fallback."""
    html: str
    text: str
