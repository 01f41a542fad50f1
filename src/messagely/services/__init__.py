from .routers import AuthAPI, UserAPI, MessageAPI
from .errors import register_error_handlers

__all__ = ["AuthAPI", "UserAPI", "MessageAPI", "register_error_handlers"]
