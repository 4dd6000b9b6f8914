from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.enums import UpdateStatus

SLUG_PATTERN = r"^[a-z0-9-]+$"

class _CamelModel(BaseModel):
    # stored JSON uses camelCase keys (publishedDate, editedDate)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

class Update(_CamelModel):
    slug: str = Field(pattern=SLUG_PATTERN)
    title: str
    excerpt: str = ""
    content: str = ""
    status: UpdateStatus = UpdateStatus.draft
    # ISO 8601, empty until first published
    published_date: str = ""
    edited_date: str = ""
    author: str = ""
    images: list[str] = Field(default_factory=list)

class UpdateIndexEntry(_CamelModel):
    slug: str
    title: str
    excerpt: str = ""
    published_date: str = ""
    status: UpdateStatus = UpdateStatus.published

class UpdateIndex(_CamelModel):
    updates: list[UpdateIndexEntry] = Field(default_factory=list)
