from django.urls import path
from .views import LoginView, RefreshView, LogoutView, ForgotPasswordView, ResetPasswordView, MeView

urlpatterns = [
    path("login", LoginView.as_view(), name="auth_login"),
    path("refresh", RefreshView.as_view(), name="auth_refresh"),
    path("logout", LogoutView.as_view(), name="auth_logout"),
    path("forgot-password", ForgotPasswordView.as_view(), name="auth_forgot_password"),
    path("reset-password", ResetPasswordView.as_view(), name="auth_reset_password"),
    path("me", MeView.as_view(), name="auth_me"),
]
