from pydantic import BaseModel, ConfigDict, Field

class MagicLinkToken(BaseModel):
    """Record stored under auth:token:{id}. timestamp is epoch milliseconds."""

    model_config = ConfigDict(extra="ignore")

    email: str = Field(min_length=3)
    timestamp: int
    used: bool = False

class SessionPayload(BaseModel):
    email: str = Field(min_length=3)
    iat: int
    exp: int
