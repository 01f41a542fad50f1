from abc import ABC, abstractmethod
from datetime import datetime

from .dto import *

class CredentialInterface(ABC):
    @abstractmethod
    async def register(
            self,
            username: str,
            password: str,
            first_name: str,
            last_name: str,
            phone: str
    ) -> UserDTO:
        """
        Creates a new user with a freshly hashed password.
        :param username:
        :param password: raw password, never stored
        :param first_name:
        :param last_name:
        :param phone:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def verify(
            self,
            username: str,
            password: str
    ) -> bool:
        """
        Checks a raw password against the stored hash.
        :param username:
        :param password:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def touch_login(
            self,
            username: str
    ) -> datetime:
        """
        Sets last_login_at to the current time.
        :param username:
        :return: the new last_login_at
        """
        raise NotImplementedError()


class UserInterface(ABC):
    @abstractmethod
    async def list_all(self) -> list[PublicUserDTO]:
        """
        Public profiles of every user, in registration order.
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_by_username(
            self,
            username: str
    ) -> UserDTO:
        """
        Full public profile of a user.
        :param username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def exists(
            self,
            username: str
    ) -> bool:
        raise NotImplementedError()


class MessageInterface(ABC):
    @abstractmethod
    async def send(
            self,
            from_username: str,
            to_username: str,
            body: str
    ) -> MessageDTO:
        """
        Creates a new message between two existing users.
        :param from_username:
        :param to_username:
        :param body:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def mark_read(
            self,
            message_id: int,
            reader_username: str
    ) -> MessageReadDTO:
        """
        Marks a message as read by its recipient.
        :param message_id:
        :param reader_username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get(
            self,
            message_id: int,
            viewer_username: str
    ) -> MessageDetailDTO:
        """
        Gets a message with both participants, if the viewer took part in it.
        :param message_id:
        :param viewer_username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def messages_from(
            self,
            username: str
    ) -> list[SentMessageDTO]:
        """
        Messages sent by a user, oldest first.
        :param username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def messages_to(
            self,
            username: str
    ) -> list[ReceivedMessageDTO]:
        """
        Messages received by a user, oldest first.
        :param username:
        :return:
        """
        raise NotImplementedError()
