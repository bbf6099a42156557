from .auth import LoginView, LogoutView
from .me import MeView
from .users import UserViewSet

__all__ = [
    "LoginView",
    "LogoutView",
    "MeView",
    "UserViewSet",
]
