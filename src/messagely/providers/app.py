from dishka import Provider, Scope, provide
from datetime import timedelta
from typing import AsyncIterable
import logging

from messagely.config import Config, load_config
from messagely.core.db_manager import DatabaseManager
from messagely.core.gateways import CredentialGateway, UserGateway, MessageGateway
from messagely.core.security import PasswordHasher
from messagely.core.tokens import SessionIssuer

from messagely.services.routers import AuthAPI, UserAPI, MessageAPI

class AdaptersProvider(Provider):
    def __init__(self, config: Config | None = None, env_path: str | None = ".env"):
        super().__init__()
        self._config = config
        self._env_path = env_path

    @provide(scope=Scope.APP)
    def get_config(self) -> Config:
        return self._config or load_config(self._env_path)

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("messagely")

    @provide(scope=Scope.APP)
    async def get_db_manager(self, config: Config) -> AsyncIterable[DatabaseManager]:
        db_manager = DatabaseManager(config)
        await db_manager.initialize()
        await db_manager.create_tables()
        yield db_manager
        await db_manager.close()

    @provide(scope=Scope.APP)
    def get_password_hasher(self, config: Config, logger: logging.Logger) -> PasswordHasher:
        return PasswordHasher(rounds=config.security.bcrypt_rounds, logger=logger)

    @provide(scope=Scope.APP)
    def get_session_issuer(self, config: Config, logger: logging.Logger) -> SessionIssuer:
        return SessionIssuer(
            secret_key=config.jwt.secret_key,
            ttl=timedelta(minutes=config.jwt.ttl_minutes),
            algorithm=config.jwt.algorithm,
            logger=logger
        )

class GatewaysProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_credential_gateway(
            self,
            db_manager: DatabaseManager,
            hasher: PasswordHasher,
            logger: logging.Logger
    ) -> CredentialGateway:
        return CredentialGateway(db_manager, hasher, logger)

    @provide(scope=Scope.REQUEST)
    def get_user_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> UserGateway:
        return UserGateway(db_manager, logger)

    @provide(scope=Scope.REQUEST)
    def get_message_gateway(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger
    ) -> MessageGateway:
        return MessageGateway(db_manager, logger)

class ServicesProvider(Provider):
    @provide(scope=Scope.APP)
    def get_auth_api(
        self,
        session_issuer: SessionIssuer,
        logger: logging.Logger
    ) -> AuthAPI:
        return AuthAPI(
            session_issuer=session_issuer,
            logger=logger
        )

    @provide(scope=Scope.APP)
    def get_user_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> UserAPI:
        return UserAPI(
            logger=logger,
            auth_api=auth_api
        )

    @provide(scope=Scope.APP)
    def get_message_api(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI
    ) -> MessageAPI:
        return MessageAPI(
            logger=logger,
            auth_api=auth_api
        )
