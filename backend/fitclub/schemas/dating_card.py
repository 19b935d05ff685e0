from __future__ import annotations
import re
from pydantic import BaseModel, Field, field_validator
from typing import Literal, List
from uuid import UUID
from datetime import datetime

CardSex = Literal["male", "female"]
CardStatus = Literal["pending", "public", "expired", "hidden"]
ApplicationStatus = Literal["submitted", "accepted", "rejected", "canceled"]

INSTAGRAM_ID_RE = re.compile(r"^[A-Za-z0-9._]{1,30}$")


def normalize_instagram_id(value: str) -> str:
    """Strip leading @ and whitespace; raise if what is left is not a valid handle."""
    handle = re.sub(r"\s+", "", value.strip().lstrip("@"))
    if not INSTAGRAM_ID_RE.match(handle):
        raise ValueError("instagram_id must be 1-30 letters, digits, dots or underscores")
    return handle


def check_relative_paths(paths: list[str]) -> list[str]:
    # only object paths inside our bucket, never external URLs
    for p in paths:
        if not p or "://" in p or p.startswith("/") or ".." in p.split("/"):
            raise ValueError("photo_paths must be relative object paths")
    return paths


class CardCreate(BaseModel):
    sex: CardSex
    display_nickname: str = Field(min_length=1, max_length=40)
    age: int | None = Field(default=None, ge=19, le=99)
    region: str | None = Field(default=None, max_length=60)
    intro: str | None = Field(default=None, max_length=1000)
    instagram_id: str | None = None
    photo_paths: List[str] = Field(default_factory=list, max_length=3)

    @field_validator("photo_paths")
    @classmethod
    def relative_paths(cls, v: list[str]):
        return check_relative_paths(v)

    @field_validator("instagram_id")
    @classmethod
    def instagram_handle(cls, v: str | None):
        return normalize_instagram_id(v) if v else None


class CardPublic(BaseModel):
    id: UUID
    sex: CardSex
    status: CardStatus
    display_nickname: str
    age: int | None = None
    region: str | None = None
    intro: str | None = None
    photo_urls: list[str] = Field(default_factory=list)
    created_at: datetime
    published_at: datetime | None = None
    expires_at: datetime | None = None
    remaining: str | None = None
    queue_position: int | None = None


class SexQueueStats(BaseModel):
    public_count: int
    pending_count: int
    slot_limit: int


class QueueStats(BaseModel):
    male: SexQueueStats
    female: SexQueueStats


class UploadResult(BaseModel):
    path: str
    mime_type: str


class ApplicationCreate(BaseModel):
    card_id: UUID
    age: int = Field(ge=19, le=99)
    height_cm: int = Field(ge=120, le=230)
    training_years: int = Field(ge=0, le=50)
    region: str = Field(default="", max_length=30)
    job: str = Field(default="", max_length=50)
    intro_text: str = Field(min_length=1, max_length=1000)
    instagram_id: str
    photo_paths: List[str] = Field(min_length=2, max_length=2)
    consent: bool

    @field_validator("instagram_id")
    @classmethod
    def instagram_handle(cls, v: str):
        return normalize_instagram_id(v)

    @field_validator("intro_text")
    @classmethod
    def intro_not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("intro_text is required")
        return v.strip()

    @field_validator("photo_paths")
    @classmethod
    def relative_paths(cls, v: list[str]):
        return check_relative_paths(v)

    @field_validator("consent")
    @classmethod
    def consent_given(cls, v: bool):
        if not v:
            raise ValueError("consent is required")
        return v


class ApplicationCreated(BaseModel):
    id: UUID


class ApplicationPublic(BaseModel):
    id: UUID
    card_id: UUID
    applicant_user_id: UUID
    age: int
    height_cm: int
    training_years: int
    region: str
    job: str
    intro_text: str
    status: ApplicationStatus
    created_at: datetime
    instagram_id: str | None = None  # hidden from the card owner until accepted
    photo_urls: list[str] = Field(default_factory=list)


class ReceivedApplications(BaseModel):
    cards: list[CardPublic]
    applications: list[ApplicationPublic]


class ApplicationStatusUpdate(BaseModel):
    status: Literal["accepted", "rejected", "canceled"]


class ApplicationStatusResult(BaseModel):
    ok: bool = True
    status: ApplicationStatus
    card_hidden: bool


class Connection(BaseModel):
    application_id: UUID
    card_id: UUID
    created_at: datetime
    role: Literal["owner", "applicant"]
    other_user_id: UUID
    other_nickname: str
    my_instagram_id: str | None = None
    other_instagram_id: str | None = None


class ConnectionList(BaseModel):
    items: list[Connection]
