from app.models.auth import MagicLinkToken, SessionPayload
from app.models.enums import UpdateStatus
from app.models.update import Update, UpdateIndex, UpdateIndexEntry

__all__ = ["MagicLinkToken", "SessionPayload", "Update", "UpdateIndex", "UpdateIndexEntry", "UpdateStatus"]
