from pydantic import BaseModel

from messagely.core.dto import MessageDTO, MessageReadDTO, MessageDetailDTO

class MessageSendRequest(BaseModel):
    to_username: str
    body: str

class MessageSentResponse(BaseModel):
    message: MessageDTO

class MessageDetailResponse(BaseModel):
    message: MessageDetailDTO

class MessageReadResponse(BaseModel):
    message: MessageReadDTO
