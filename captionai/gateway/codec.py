"""
Purpose:
- Shape a GenerationRequest into a generateContent payload, and the reply back into captions.
- Pure functions only; no network, no settings.

Notes:
- Reply text lives at candidates[0].content.parts[0].text.
- Lines of 5 chars or fewer are chatter ("Hi", "1.", blank) and are dropped.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from .errors import EncodingError, EmptyResponseError
from .schema import GenerationRequest, GenerationResult, MAX_CAPTIONS, MIN_CAPTION_CHARS

DEFAULT_PLATFORM = "general"
DEFAULT_TONE = "engaging"
DEFAULT_LANGUAGE = "English"


def _label(value: Any, default: str) -> str:
    if value is None:
        return default
    return getattr(value, "value", value) or default


def compose_instruction(req: GenerationRequest) -> str:
    platform = _label(req.platform, DEFAULT_PLATFORM)
    tone = _label(req.tone, DEFAULT_TONE)
    language = _label(req.language, DEFAULT_LANGUAGE)

    parts = [
        f"Generate exactly {MAX_CAPTIONS} engaging social media captions for this image.",
        f"Platform: {platform}, Tone: {tone}, Language: {language}.",
    ]
    if req.context:
        parts.append(f"Context: {req.context}")
    parts.append("Return only the captions, one per line, with no numbering or extra commentary.")
    return " ".join(parts)


def split_data_url(data_url: str) -> Tuple[str, str]:
    """
    'data:image/png;base64,AAAA' -> ('image/png', 'AAAA').
    Raises EncodingError when either half is missing.
    """
    header, sep, data = (data_url or "").partition(",")
    if not sep:
        raise EncodingError("Invalid Data URL")
    _scheme, colon, mime_part = header.partition(":")
    if not colon:
        raise EncodingError("Invalid Data URL")
    mime_type = mime_part.split(";")[0].strip()
    if not mime_type:
        raise EncodingError("MimeType not found in Data URL")
    return mime_type, data


def build_payload(req: GenerationRequest, temperature: float) -> Dict[str, Any]:
    mime_type, data = split_data_url(req.image_data_url)
    return {
        "contents": [{
            "parts": [
                {"text": compose_instruction(req)},
                {"inlineData": {"mimeType": mime_type, "data": data}},
            ]
        }],
        "generationConfig": {"temperature": temperature},
    }


def extract_text(body: Any) -> Optional[str]:
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


def parse_captions(text: str) -> List[str]:
    # only "\n" separates captions; strip() drops a trailing "\r"
    lines = (ln.strip() for ln in text.split("\n"))
    return [ln for ln in lines if len(ln) >= MIN_CAPTION_CHARS][:MAX_CAPTIONS]


def decode_result(body: Any) -> GenerationResult:
    text = extract_text(body)
    if not text:
        raise EmptyResponseError()
    # an empty filtered list is still a success (zero captions)
    return GenerationResult(captions=tuple(parse_captions(text)))
