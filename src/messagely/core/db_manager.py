from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
import logging

from messagely.config import Config
from .database import Base


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    def __init__(self, config: Config):
        self.config = config
        self.engine = None
        self.session_factory = None
        self._logger = logging.getLogger(__name__)

    @property
    def is_sqlite(self) -> bool:
        return not self.config.db.host

    async def initialize(self):
        if self.is_sqlite:
            Path(self.config.db.path).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_async_engine(
                url=self.config.db.url,
                echo=False,
            )
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                url=self.config.db.url,
                pool_size=30,
                max_overflow=20,
                pool_pre_ping=True,
                pool_timeout=60,
                pool_recycle=-1,
                echo=False,
            )

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._logger.info("Database engine initialized (%s)", "sqlite" if self.is_sqlite else "postgresql")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if not self.engine:
            await self.initialize()

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self):
        if not self.engine:
            await self.initialize()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
