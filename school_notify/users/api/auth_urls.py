from django.urls import path

from .auth_views import JWTCreateView
from .auth_views import JWTRefreshView
from .auth_views import JWTVerifyView
from .auth_views import LogoutView
from .auth_views import RegisterView

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("jwt/create/", JWTCreateView.as_view(), name="jwt-create"),
    path("jwt/refresh/", JWTRefreshView.as_view(), name="jwt-refresh"),
    path("jwt/verify/", JWTVerifyView.as_view(), name="jwt-verify"),
]
