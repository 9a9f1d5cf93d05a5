"""
Purpose:
- Pydantic shapes for rows and sessions coming back from Supabase.
"""

from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CaptionRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    user_id: str
    captions: List[str] = Field(default_factory=list)
    platform: Optional[str] = None
    tone: Optional[str] = None
    language: Optional[str] = None
    additional_info: Optional[str] = None
    created_at: Optional[datetime] = None


class SessionUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: Optional[SessionUser] = None
