from fastapi import status, APIRouter
from fastapi.security import OAuth2PasswordBearer

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging

from messagely.core.gateways import CredentialGateway
from messagely.core.tokens import SessionIssuer
from messagely.core.exceptions import ForbiddenError
from ..models.auth_api_models import *


class AuthAPI:
    """
    Authentication API service: registration, password login and session tokens.

    Login verifies the password through the credential gateway, stamps the
    login time and answers with a signed JWT. Every other router resolves the
    bearer token back to a username through ``get_current_user``.
    Attributes:
        session_issuer (SessionIssuer): Signs and verifies session tokens
        logger (logging.Logger): Logger instance
        oauth2_scheme (OAuth2PasswordBearer): OAuth2 password bearer scheme
        _auth_router (APIRouter): FastAPI router for authentication endpoints
    """
    def __init__(
            self,
            session_issuer: SessionIssuer,
            logger: logging.Logger
    ):
        self.session_issuer = session_issuer
        self.logger = logger
        self.oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")
        self._auth_router = APIRouter(tags=["Authentication"])
        self._register_endpoints()

    @property
    def auth_router(self) -> APIRouter:
        return self._auth_router

    def get_router(self) -> APIRouter:
        return self._auth_router

    async def get_current_user(self, token: str) -> str:
        """
        Validate a session token and extract the username.
        Args:
            token: JWT token from the authorization header
        Returns:
            str: Username the token was issued for
        Raises:
            SessionTokenError: If the token is malformed, forged or expired
        """
        return self.session_issuer.recover(token)

    async def ensure_correct_user(self, token: str, username: str) -> str:
        """
        Like get_current_user, but the token must belong to ``username``.
        """
        current = await self.get_current_user(token)
        if current != username:
            raise ForbiddenError(f"Only {username} can access this resource")
        return current

    def _register_endpoints(self):
        @self.auth_router.post("/auth/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
        @inject
        async def register(
                user_data: UserRegisterRequest,
                credential_gateway: FromDishka[CredentialGateway]
        ):
            """
            Register a new user and log them in.
            Returns: TokenResponse: session token for the new user
            """
            user = await credential_gateway.register(
                username=user_data.username,
                password=user_data.password,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                phone=user_data.phone
            )
            await credential_gateway.touch_login(user.username)

            return TokenResponse(token=self.session_issuer.issue(user.username))

        @self.auth_router.post("/auth/login", response_model=TokenResponse)
        @inject
        async def login(
                login_data: LoginRequest,
                credential_gateway: FromDishka[CredentialGateway]
        ):
            """
            Exchange a username and password for a session token.
            Returns: TokenResponse: session token
            """
            user = await credential_gateway.authenticate(login_data.username, login_data.password)

            return TokenResponse(token=self.session_issuer.issue(user.username))
