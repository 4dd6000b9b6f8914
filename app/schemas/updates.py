from typing import Annotated

from pydantic import BaseModel, StringConstraints, field_validator

from app.models.enums import UpdateStatus
from app.models.update import SLUG_PATTERN, Update

Slug = Annotated[str, StringConstraints(strip_whitespace=True, pattern=SLUG_PATTERN)]
Filename = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")]

class SaveUpdateIn(BaseModel):
    slug: Slug | None = None
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    excerpt: Annotated[str, StringConstraints(strip_whitespace=True, max_length=300)] = ""
    content: str = ""
    status: UpdateStatus

    @field_validator("slug", mode="before")
    @classmethod
    def _blank_slug_is_new(cls, v):
        # new updates arrive without a slug (or with an empty one)
        if isinstance(v, str) and not v.strip():
            return None
        return v

class SaveUpdateOut(BaseModel):
    success: bool = True
    slug: str
    isNew: bool

class DeleteUpdateIn(BaseModel):
    slug: Slug

class DeleteImageIn(BaseModel):
    slug: Slug
    filename: Filename

class UploadImageOut(BaseModel):
    success: bool = True
    path: str

class UpdatesOut(BaseModel):
    updates: list[Update]

class SuccessOut(BaseModel):
    success: bool = True
