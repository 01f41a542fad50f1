from fastapi import APIRouter, status, Depends, Path
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from ..models.message_api_models import *
from messagely.core.gateways import MessageGateway, MAX_MESSAGE_ID
from .auth_api import AuthAPI


class MessageAPI:
    """
    Message ledger endpoints: sending, reading a single message and
    read acknowledgement.

    The sender of a new message is always the token's subject. Only the
    two participants may view a message, and only the recipient may mark
    it read.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for user validation
        message_router: FastAPI router containing message endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._message_router = APIRouter(tags=["Messages"])
        self._register_endpoints()

    @property
    def message_router(self) -> APIRouter:
        return self._message_router

    def get_router(self) -> APIRouter:
        return self._message_router

    def _register_endpoints(self):
        @self.message_router.get("/messages/{message_id}", response_model=MessageDetailResponse)
        @inject
        async def get_message(
                message_gateway: FromDishka[MessageGateway],
                message_id: int = Path(..., ge=1, le=MAX_MESSAGE_ID),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            username = await self.auth_api.get_current_user(token)

            return MessageDetailResponse(message=await message_gateway.get(message_id, username))

        @self.message_router.post("/messages", response_model=MessageSentResponse, status_code=status.HTTP_201_CREATED)
        @inject
        async def send_message(
                message_data: MessageSendRequest,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            from_username = await self.auth_api.get_current_user(token)

            message = await message_gateway.send(
                from_username=from_username,
                to_username=message_data.to_username,
                body=message_data.body
            )

            return MessageSentResponse(message=message)

        @self.message_router.post("/messages/{message_id}/read", response_model=MessageReadResponse)
        @inject
        async def mark_read(
                message_gateway: FromDishka[MessageGateway],
                message_id: int = Path(..., ge=1, le=MAX_MESSAGE_ID),
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            username = await self.auth_api.get_current_user(token)

            return MessageReadResponse(message=await message_gateway.mark_read(message_id, username))
