from .auth_api import AuthAPI
from .user_api import UserAPI
from .message_api import MessageAPI

__all__ = ["AuthAPI", "UserAPI", "MessageAPI"]
