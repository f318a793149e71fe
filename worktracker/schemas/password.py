"""Password vault request/response schemas."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints, field_validator

from worktracker.utils.strength import Strength

Category = Literal[
    "Social Media", "Banking", "Work", "Entertainment", "Shopping", "Email", "Gaming", "Other"
]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]

# Descriptive fields are trimmed; the password itself is kept byte-for-byte
_TRIMMED = ("title", "website", "username", "email", "notes")


class _TrimmedFields(BaseModel):
    @field_validator(*_TRIMMED, mode="before", check_fields=False)
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class PasswordCreate(_TrimmedFields):
    title: str = Field(..., min_length=1, max_length=100)
    website: str = Field("", max_length=200)
    username: str = Field("", max_length=100)
    email: str = Field("", max_length=100)
    password: str = Field(..., min_length=1)  # plaintext; encrypted before storage
    category: Category = "Other"
    notes: str = Field("", max_length=500)
    tags: list[Tag] = Field(default_factory=list)


class PasswordUpdate(_TrimmedFields):
    title: str | None = Field(None, min_length=1, max_length=100)
    website: str | None = Field(None, max_length=200)
    username: str | None = Field(None, max_length=100)
    email: str | None = Field(None, max_length=100)
    password: str | None = Field(None, min_length=1)
    category: Category | None = None
    notes: str | None = Field(None, max_length=500)
    tags: list[Tag] | None = None


class PasswordResponse(BaseModel):
    id: str
    user_id: str
    title: str
    website: str
    username: str
    email: str
    decrypted_password: str
    category: str
    notes: str
    tags: list[str]
    strength: Strength
    last_modified: datetime
    created_at: datetime
    updated_at: datetime
    # the stored envelope is NEVER returned


class CountBucket(BaseModel):
    name: str
    count: int


class PasswordStats(BaseModel):
    total_passwords: int
    category_stats: list[CountBucket]
    strength_stats: list[CountBucket]
