"""
Purpose:
- Pydantic models for caption generation in/out so the gateway contract is explicit.
- Enumerations mirror the choices offered by the front end.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

MAX_CAPTIONS = 5
MIN_CAPTION_CHARS = 6      # lines of length <= 5 are dropped
MAX_CONTEXT_CHARS = 200


class Platform(str, Enum):
    instagram = "Instagram"
    facebook = "Facebook"
    tiktok = "TikTok"
    linkedin = "LinkedIn"
    twitter = "Twitter"


class Tone(str, Enum):
    professional = "Professional"
    playful = "Playful"
    inspirational = "Inspirational"
    witty = "Witty"
    direct = "Direct"


class Language(str, Enum):
    english = "English"
    spanish = "Spanish"
    french = "French"
    german = "German"
    italian = "Italian"
    portuguese = "Portuguese"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_data_url: str = Field(..., description="data:<mime>;base64,<payload>")
    platform: Optional[Platform] = None
    tone: Optional[Tone] = None
    language: Optional[Language] = None
    context: Optional[str] = Field(default=None, max_length=MAX_CONTEXT_CHARS)

    @classmethod
    def from_upload(
        cls,
        raw: bytes,
        mime_type: str,
        platform: Optional[Platform] = None,
        tone: Optional[Tone] = None,
        language: Optional[Language] = None,
        context: Optional[str] = None,
    ) -> "GenerationRequest":
        """
        Wrap raw image bytes (already validated by the caller) into a Data-URL request.
        Blank context is treated as absent.
        """
        encoded = base64.b64encode(raw).decode("ascii")
        ctx = (context or "").strip() or None
        return cls(
            image_data_url=f"data:{mime_type};base64,{encoded}",
            platform=platform,
            tone=tone,
            language=language,
            context=ctx,
        )


@dataclass(frozen=True)
class GenerationResult:
    captions: Tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.captions)

    def __len__(self) -> int:
        return len(self.captions)

    def as_list(self) -> List[str]:
        return list(self.captions)
