class ConfigurationMissing(RuntimeError):
    """A required secret or credential is not configured."""

class ContentStoreError(Exception):
    """Unexpected content store failure (network, auth, 5xx...)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

class NotFoundError(ContentStoreError):
    pass

class ConflictError(ContentStoreError):
    """Write presented a stale (or missing) revision tag."""
