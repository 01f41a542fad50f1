from pydantic import BaseModel

from messagely.core.dto import PublicUserDTO, UserDTO, SentMessageDTO, ReceivedMessageDTO

class UserListResponse(BaseModel):
    users: list[PublicUserDTO]

class UserDetailResponse(BaseModel):
    user: UserDTO

class SentMessagesResponse(BaseModel):
    messages: list[SentMessageDTO]

class ReceivedMessagesResponse(BaseModel):
    messages: list[ReceivedMessageDTO]
