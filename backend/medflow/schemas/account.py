from pydantic import BaseModel
from typing import Optional


class Account(BaseModel):
    """Persisted account record: ``{id, username, password}``.

    ``password`` holds the PBKDF2 digest string, never the plain value.
    """
    id: str
    username: str
    password: str


class Credentials(BaseModel):
    username: str
    password: str


class AccountResponse(BaseModel):
    id: str
    username: str

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    user: Optional[AccountResponse] = None
