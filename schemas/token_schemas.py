from pydantic import BaseModel, ConfigDict


class TokenResponse(BaseModel):
    """
    A token as shown in device/session lists.

    Deliberately has no field for the token value or its hash.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: int
    remember: int
    last_activity: int
    expires: int | None = None
    can_recover_credentials: bool
    current: bool = False


class MessageResponse(BaseModel):
    message: str
