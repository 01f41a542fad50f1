from pydantic import BaseModel
from datetime import datetime

class PublicUserDTO(BaseModel):
    username: str
    first_name: str
    last_name: str
    phone: str

class UserDTO(PublicUserDTO):
    join_at: datetime
    last_login_at: datetime | None = None

class MessageDTO(BaseModel):
    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: datetime
    read_at: datetime | None = None

class MessageReadDTO(BaseModel):
    id: int
    read_at: datetime

class SentMessageDTO(BaseModel):
    """ Outbox entry, joined with the recipient """
    id: int
    to_user: PublicUserDTO
    body: str
    sent_at: datetime
    read_at: datetime | None = None

class ReceivedMessageDTO(BaseModel):
    """ Inbox entry, joined with the sender """
    id: int
    from_user: PublicUserDTO
    body: str
    sent_at: datetime
    read_at: datetime | None = None

class MessageDetailDTO(BaseModel):
    id: int
    from_user: PublicUserDTO
    to_user: PublicUserDTO
    body: str
    sent_at: datetime
    read_at: datetime | None = None

class TokenClaimsDTO(BaseModel):
    sub: str
    iat: int
    exp: int
