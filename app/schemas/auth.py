from pydantic import BaseModel, EmailStr

class RequestLinkIn(BaseModel):
    email: EmailStr

class RequestLinkOut(BaseModel):
    success: bool = True
