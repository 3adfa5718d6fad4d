from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

TITLE_MAX_LENGTH = 200


class Mood(str, Enum):
    HAPPY = "Happy"
    SAD = "Sad"
    NEUTRAL = "Neutral"
    STRESSED = "Stressed"
    ANGRY = "Angry"


# Clients send tags either as "work, family" or as ["work", "family"]
TagsInput = Union[str, List[str]]


def normalize_tags(tags: Optional[TagsInput]) -> List[str]:
    """
    Resolve the string-or-array tags input into an ordered list.

    Strings are split on commas, trimmed, and empty tokens dropped. Lists are
    kept as given. Duplicates survive either way.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tag.strip() for tag in tags.split(",") if tag.strip()]
    return list(tags)


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    return value


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --- REQUEST MODELS ---
class EntryCreateRequest(BaseModel):
    title: str = Field(..., description="Entry title, trimmed, 1-200 characters.")
    content: str = Field(..., description="Body of the entry. May be empty.")
    mood: Mood = Mood.NEUTRAL
    tags: Optional[TagsInput] = Field(default_factory=list)
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("mood", mode="before")
    @classmethod
    def default_mood(cls, value):
        # An empty mood falls back to the default like a missing one
        return value or Mood.NEUTRAL

    @field_validator("tags")
    @classmethod
    def split_tags(cls, value: Optional[TagsInput]) -> List[str]:
        return normalize_tags(value)


class EntryUpdateRequest(BaseModel):
    """Partial update: only the fields present in the body are written."""
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[Mood] = None
    tags: Optional[TagsInput] = None
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_title(value)

    @field_validator("tags")
    @classmethod
    def split_tags(cls, value: Optional[TagsInput]) -> Optional[List[str]]:
        if value is None:
            return None
        return normalize_tags(value)

    def changes(self) -> dict:
        fields = self.model_dump(mode="json", exclude_unset=True)
        # null only means something for image_url (it clears the image)
        return {
            key: value
            for key, value in fields.items()
            if value is not None or key == "image_url"
        }


class EntryFilters(BaseModel):
    search: Optional[str] = None
    mood: Optional[Mood] = None
    tag: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("search", "tag", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("mood", mode="before")
    @classmethod
    def blank_mood(cls, value):
        return value or None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def check_date(cls, value):
        if value is None or value == "":
            return None
        return parse_timestamp(value)


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


# --- RESPONSE MODELS ---
class JournalEntryResponse(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    mood: Mood
    tags: List[str]
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class EntryListResponse(BaseModel):
    entries: List[JournalEntryResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
