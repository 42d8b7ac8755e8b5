from .auth import LoginView, LogoutView, RegisterView
from .me import ChangePasswordView, MeView
from .staff import StaffListCreateView

__all__ = [
    "RegisterView",
    "LoginView",
    "LogoutView",
    "MeView",
    "ChangePasswordView",
    "StaffListCreateView",
]
