from fastapi import APIRouter, Depends
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from ..models.user_api_models import *
from messagely.core.gateways import UserGateway, MessageGateway
from .auth_api import AuthAPI


class UserAPI:
    """
    User directory endpoints.

    Listing users only needs a valid session; a user's own profile, inbox
    and outbox are visible to that user alone.
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._user_router = APIRouter(tags=["Users"])
        self._register_endpoints()

    @property
    def user_router(self) -> APIRouter:
        return self._user_router

    def get_router(self) -> APIRouter:
        return self._user_router

    def _register_endpoints(self):
        @self.user_router.get("/users", response_model=UserListResponse)
        @inject
        async def list_users(
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.get_current_user(token)

            return UserListResponse(users=await user_gateway.list_all())

        @self.user_router.get("/users/{username}", response_model=UserDetailResponse)
        @inject
        async def get_user(
                username: str,
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)

            return UserDetailResponse(user=await user_gateway.get_by_username(username))

        @self.user_router.get("/users/{username}/to", response_model=ReceivedMessagesResponse)
        @inject
        async def messages_to(
                username: str,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)

            return ReceivedMessagesResponse(messages=await message_gateway.messages_to(username))

        @self.user_router.get("/users/{username}/from", response_model=SentMessagesResponse)
        @inject
        async def messages_from(
                username: str,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)

            return SentMessagesResponse(messages=await message_gateway.messages_from(username))
