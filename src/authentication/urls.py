"""URL patterns for account endpoints."""

from django.urls import path

from .views import (
    LoginView,
    LogoutView,
    ProfileView,
    RegisterView,
    UpdateProfileView,
    UserDetailView,
    UserListView,
)

urlpatterns = [
    path("", UserListView.as_view(), name="user-list"),
    path("register/", RegisterView.as_view(), name="user-register"),
    path("login/", LoginView.as_view(), name="user-login"),
    path("logout/", LogoutView.as_view(), name="user-logout"),
    path("profile/", ProfileView.as_view(), name="user-profile"),
    path("update/", UpdateProfileView.as_view(), name="user-update"),
    path("<uuid:pk>/", UserDetailView.as_view(), name="user-detail"),
]
