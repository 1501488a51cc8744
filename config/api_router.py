from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from school_notify.chat.api.views import MessageViewSet
from school_notify.notifications.api.views import NotificationViewSet
from school_notify.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("users", UserViewSet)
router.register("notifications", NotificationViewSet, basename="notifications")
router.register("messages", MessageViewSet, basename="messages")


app_name = "api"
urlpatterns = [
    path("auth/", include("school_notify.users.api.auth_urls")),
    path("media/", include("school_notify.media.api.urls")),
    path(
        "audit/",
        include(("school_notify.audit.api.urls", "audit"), namespace="audit"),
    ),
    *router.urls,
]
