# users/urls.py

"""
AUTH + USER ROUTES

Mounted twice from backend/urls.py:
- /api/auth/   -> auth_urlpatterns (session login/logout, me, JWT)
- /api/users/  -> urlpatterns (user management)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import LoginView, LogoutView, MeView, UserViewSet

router = SimpleRouter()
router.register(r"", UserViewSet, basename="users")

auth_urlpatterns = [
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    # ---------------- TOKEN AUTH ----------------
    path("jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
]

urlpatterns = [
    path("", include(router.urls)),
]
