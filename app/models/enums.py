from enum import Enum

class UpdateStatus(str, Enum):
    draft = "draft"
    published = "published"
    unpublished = "unpublished"
