from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Credentials(BaseModel):
    # Lengths are checked by the user store so failures carry its error codes
    username: str = ""
    password: str = ""


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    created_at: datetime


class UserEnvelope(BaseModel):
    user: UserResponse | None = None


class OkResponse(BaseModel):
    ok: bool = True
