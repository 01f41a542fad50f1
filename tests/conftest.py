"""
Shared fixtures: a throwaway SQLite database per test, cheap bcrypt,
and a controllable clock.
"""
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from messagely.config import Config, JWTConfig, DBConfig, SecurityConfig
from messagely.core.db_manager import DatabaseManager
from messagely.core.gateways import CredentialGateway, UserGateway, MessageGateway
from messagely.core.security import PasswordHasher
from messagely.core.tokens import SessionIssuer
from messagely.main import create_app


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        jwt=JWTConfig(secret_key="test-secret-key", ttl_minutes=60),
        db=DBConfig(path=str(tmp_path / "messagely-test.db")),
        security=SecurityConfig(bcrypt_rounds=4),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 30, 0))


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def db_manager(config):
    manager = DatabaseManager(config)
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def credentials(db_manager, hasher, clock) -> CredentialGateway:
    return CredentialGateway(db_manager, hasher, clock=clock)


@pytest.fixture
def users(db_manager) -> UserGateway:
    return UserGateway(db_manager)


@pytest.fixture
def ledger(db_manager, clock) -> MessageGateway:
    return MessageGateway(db_manager, clock=clock)


@pytest.fixture
def issuer(clock) -> SessionIssuer:
    return SessionIssuer(secret_key="test-secret-key", ttl=timedelta(hours=24), clock=clock)


@pytest_asyncio.fixture
async def alice_and_bob(credentials, clock):
    alice = await credentials.register("alice", "secretA", "Alice", "Anderson", "+15550001")
    clock.advance(seconds=1)
    bob = await credentials.register("bob", "secretB", "Bob", "Brown", "+15550002")
    clock.advance(seconds=1)
    return alice, bob


@pytest_asyncio.fixture
async def client(config):
    app = await create_app(config)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await app.state.dishka_container.close()
