from datetime import datetime
from typing import Callable
import logging

from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import aliased

from .database import User, Message, utcnow
from .interfaces import CredentialInterface, UserInterface, MessageInterface
from .dto import (
    PublicUserDTO, UserDTO, MessageDTO, MessageReadDTO,
    SentMessageDTO, ReceivedMessageDTO, MessageDetailDTO
)
from .exceptions import (
    NotFoundError, DuplicateIdentityError, InvalidArgumentError,
    InvalidCredentialsError, ForbiddenError, AlreadyReadError
)
from .security import PasswordHasher, password_fits, MAX_PASSWORD_BYTES
from .db_manager import DatabaseManager

# Message ids are signed 64-bit integers in storage
MAX_MESSAGE_ID = 2 ** 63 - 1


def _public_user(user: User) -> PublicUserDTO:
    return PublicUserDTO(
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone
    )


def _user(user: User) -> UserDTO:
    return UserDTO(
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        join_at=user.join_at,
        last_login_at=user.last_login_at
    )


def _message(msg: Message) -> MessageDTO:
    return MessageDTO(
        id=msg.id,
        from_username=msg.from_username,
        to_username=msg.to_username,
        body=msg.body,
        sent_at=msg.sent_at,
        read_at=msg.read_at
    )


class CredentialGateway(CredentialInterface):
    """
    Owns the users table rows and the password hashes in them.
    The hash never leaves this class; every result is a public DTO.
    """
    __slots__ = ("_db_manager", "_hasher", "_logger", "_clock")

    def __init__(
            self,
            db_manager: DatabaseManager,
            hasher: PasswordHasher,
            logger: logging.Logger | None = None,
            clock: Callable[[], datetime] = utcnow
    ):
        self._db_manager = db_manager
        self._hasher = hasher
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock

    async def register(
            self,
            username: str,
            password: str,
            first_name: str,
            last_name: str,
            phone: str
    ) -> UserDTO:
        if not username or not password:
            raise InvalidArgumentError("Username and password are required")
        if first_name is None or last_name is None or phone is None:
            raise InvalidArgumentError("First name, last name and phone are required")
        if not password_fits(password):
            raise InvalidArgumentError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        hashed_password = await self._hasher.hash_password_async(password)

        async with self._db_manager.session() as session:
            try:
                stmt = insert(User).values(
                    username=username,
                    password=hashed_password,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    join_at=self._clock()
                ).returning(User)
                result = await session.execute(stmt)
                user = result.scalars().first()
                self._logger.info("Registered user %s", username)
                return _user(user)
            except IntegrityError as e:
                raise DuplicateIdentityError(username) from e
            except SQLAlchemyError as e:
                self._logger.error("Error creating user in database: %s", e, exc_info=True)
                raise

    async def verify(self, username: str, password: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User.password).where(User.username == username)
                result = await session.execute(stmt)
                hashed_password = result.scalar_one_or_none()
            except SQLAlchemyError as e:
                self._logger.error("Error reading credentials in database: %s", e, exc_info=True)
                raise

        if hashed_password is None:
            await self._hasher.burn_dummy_check_async(password)
            raise NotFoundError(f"User with username of {username} not found")

        return await self._hasher.check_password_async(password, hashed_password)

    async def touch_login(self, username: str) -> datetime:
        now = self._clock()
        async with self._db_manager.session() as session:
            try:
                stmt = update(User).where(
                    User.username == username
                ).values(last_login_at=now)
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                self._logger.error("Error updating login timestamp in database: %s", e, exc_info=True)
                raise

            if result.rowcount == 0:
                raise NotFoundError(f"User with username of {username} not found")

        return now

    async def authenticate(self, username: str, password: str) -> UserDTO:
        """
        Login: verify the password, then stamp last_login_at.
        Unknown users and wrong passwords are reported as different errors;
        the shell decides how much of that to reveal.
        """
        if not await self.verify(username, password):
            self._logger.info("Failed login for %s", username)
            raise InvalidCredentialsError("Invalid username/password")

        last_login_at = await self.touch_login(username)

        async with self._db_manager.session() as session:
            user = await session.get(User, username)
            if user is None:
                raise NotFoundError(f"User with username of {username} not found")
            profile = _user(user)

        self._logger.info("User %s logged in", username)
        return profile.model_copy(update={"last_login_at": last_login_at})


class UserGateway(UserInterface):
    """
    Read-only projections over the users table.
    """
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def list_all(self) -> list[PublicUserDTO]:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User).order_by(User.join_at)
                result = await session.execute(stmt)
                return [_public_user(user) for user in result.scalars().all()]
            except SQLAlchemyError as e:
                self._logger.error("Error listing users in database: %s", e, exc_info=True)
                raise

    async def get_by_username(self, username: str) -> UserDTO:
        async with self._db_manager.session() as session:
            try:
                user = await session.get(User, username)
            except SQLAlchemyError as e:
                self._logger.error("Error getting user by username in database: %s", e, exc_info=True)
                raise

            if user is None:
                raise NotFoundError(f"User with username of {username} not found")
            return _user(user)

    async def exists(self, username: str) -> bool:
        async with self._db_manager.session() as session:
            try:
                stmt = select(User.username).where(User.username == username)
                result = await session.execute(stmt)
                return result.scalar_one_or_none() is not None
            except SQLAlchemyError as e:
                self._logger.error("Error checking user in database: %s", e, exc_info=True)
                raise


class MessageGateway(MessageInterface):
    """
    The message ledger: directed messages between two users plus read state.

    A message moves from sent to read exactly once. The read timestamp is
    written by a single conditional UPDATE, so concurrent readers cannot
    produce two different timestamps.
    """
    __slots__ = ("_db_manager", "_logger", "_clock")

    def __init__(
            self,
            db_manager: DatabaseManager,
            logger: logging.Logger | None = None,
            clock: Callable[[], datetime] = utcnow
    ):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock

    async def send(self, from_username: str, to_username: str, body: str) -> MessageDTO:
        if body is None or not body.strip():
            raise InvalidArgumentError("Message body must not be empty")

        async with self._db_manager.session() as session:
            try:
                participants = {from_username, to_username}
                stmt = select(User.username).where(User.username.in_(participants))
                result = await session.execute(stmt)
                missing = participants - set(result.scalars().all())
                if missing:
                    raise NotFoundError(
                        f"User with username of {', '.join(sorted(missing))} not found"
                    )

                stmt = insert(Message).values(
                    from_username=from_username,
                    to_username=to_username,
                    body=body,
                    sent_at=self._clock()
                ).returning(Message)
                result = await session.execute(stmt)
                msg = result.scalars().first()

                self._logger.debug("Message %s sent from %s to %s", msg.id, from_username, to_username)
                return _message(msg)

            except SQLAlchemyError as e:
                self._logger.error("Error creating message in database: %s", e, exc_info=True)
                raise

    async def mark_read(self, message_id: int, reader_username: str) -> MessageReadDTO:
        if not 1 <= message_id <= MAX_MESSAGE_ID:
            raise NotFoundError(f"Message {message_id} not found")

        now = self._clock()
        async with self._db_manager.session() as session:
            try:
                stmt = update(Message).where(
                    Message.id == message_id,
                    Message.to_username == reader_username,
                    Message.read_at.is_(None)
                ).values(read_at=now).execution_options(synchronize_session=False)
                result = await session.execute(stmt)
                if result.rowcount == 1:
                    return MessageReadDTO(id=message_id, read_at=now)

                msg = await session.get(Message, message_id)
            except SQLAlchemyError as e:
                self._logger.error("Error marking message read in database: %s", e, exc_info=True)
                raise

            if msg is None:
                raise NotFoundError(f"Message {message_id} not found")
            if msg.to_username != reader_username:
                self._logger.warning("User %s tried to mark message %s read", reader_username, message_id)
                raise ForbiddenError(f"Only the recipient can mark message {message_id} as read")
            raise AlreadyReadError(message_id)

    async def get(self, message_id: int, viewer_username: str) -> MessageDetailDTO:
        if not 1 <= message_id <= MAX_MESSAGE_ID:
            raise NotFoundError(f"Message {message_id} not found")

        from_user = aliased(User)
        to_user = aliased(User)

        async with self._db_manager.session() as session:
            try:
                stmt = (
                    select(Message, from_user, to_user)
                    .join(from_user, Message.from_username == from_user.username)
                    .join(to_user, Message.to_username == to_user.username)
                    .where(Message.id == message_id)
                )
                result = await session.execute(stmt)
                row = result.first()
            except SQLAlchemyError as e:
                self._logger.error("Error getting message by ID in database: %s", e, exc_info=True)
                raise

        if row is None:
            raise NotFoundError(f"Message {message_id} not found")

        msg, sender, recipient = row
        if viewer_username not in (sender.username, recipient.username):
            raise ForbiddenError(f"Cannot read message {message_id}")

        return MessageDetailDTO(
            id=msg.id,
            from_user=_public_user(sender),
            to_user=_public_user(recipient),
            body=msg.body,
            sent_at=msg.sent_at,
            read_at=msg.read_at
        )

    async def messages_from(self, username: str) -> list[SentMessageDTO]:
        to_user = aliased(User)

        async with self._db_manager.session() as session:
            try:
                if await session.get(User, username) is None:
                    raise NotFoundError(f"User with username of {username} not found")

                stmt = (
                    select(Message, to_user)
                    .join(to_user, Message.to_username == to_user.username)
                    .where(Message.from_username == username)
                    .order_by(Message.sent_at, Message.id)
                )
                result = await session.execute(stmt)

                return [
                    SentMessageDTO(
                        id=msg.id,
                        to_user=_public_user(recipient),
                        body=msg.body,
                        sent_at=msg.sent_at,
                        read_at=msg.read_at
                    ) for msg, recipient in result.all()
                ]
            except SQLAlchemyError as e:
                self._logger.error("Error getting sent messages in database: %s", e, exc_info=True)
                raise

    async def messages_to(self, username: str) -> list[ReceivedMessageDTO]:
        from_user = aliased(User)

        async with self._db_manager.session() as session:
            try:
                if await session.get(User, username) is None:
                    raise NotFoundError(f"User with username of {username} not found")

                stmt = (
                    select(Message, from_user)
                    .join(from_user, Message.from_username == from_user.username)
                    .where(Message.to_username == username)
                    .order_by(Message.sent_at, Message.id)
                )
                result = await session.execute(stmt)

                return [
                    ReceivedMessageDTO(
                        id=msg.id,
                        from_user=_public_user(sender),
                        body=msg.body,
                        sent_at=msg.sent_at,
                        read_at=msg.read_at
                    ) for msg, sender in result.all()
                ]
            except SQLAlchemyError as e:
                self._logger.error("Error getting received messages in database: %s", e, exc_info=True)
                raise
