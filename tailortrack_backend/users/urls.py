# users/urls.py

from django.urls import path

from .views import (
    ChangePasswordView,
    LoginView,
    LogoutView,
    MeView,
    RegisterView,
    StaffListCreateView,
)

app_name = "users"

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("change-password/", ChangePasswordView.as_view(), name="change-password"),
    # ---------------- ADMIN ----------------
    path("staff/", StaffListCreateView.as_view(), name="staff"),
]
