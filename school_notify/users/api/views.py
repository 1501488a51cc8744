from django.conf import settings
from django.db import transaction
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser
from rest_framework.parsers import JSONParser
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from school_notify.audit.utils import log_action
from school_notify.media.services import delete_media
from school_notify.users.models import User

from .permissions import IsAdminRole
from .serializers import PasswordChangeSerializer
from .serializers import ProfilePictureSerializer
from .serializers import ProfileUpdateSerializer
from .serializers import UserSerializer
from .serializers import UserWriteSerializer
from .serializers import replace_profile_picture


@extend_schema_view(
    list=extend_schema(tags=["Users"]),
    retrieve=extend_schema(tags=["Users"]),
    create=extend_schema(tags=["Users"]),
    update=extend_schema(tags=["Users"]),
    partial_update=extend_schema(tags=["Users"]),
    destroy=extend_schema(tags=["Users"]),
)
class UserViewSet(ModelViewSet):
    """Accounts directory and self-service profile.

    - list/retrieve/me: any signed-in user
    - create/update/destroy: admins only
    - profile, profile/password, profile/picture: the caller's own account
    """

    queryset = User.objects.select_related("profile_picture").all()
    serializer_class = UserSerializer
    pagination_class = None
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_serializer_class(self):
        if self.action in {"create", "update", "partial_update"}:
            return UserWriteSerializer
        return super().get_serializer_class()

    def get_permissions(self):
        if self.action in {"create", "update", "partial_update", "destroy"}:
            return [IsAuthenticated(), IsAdminRole()]
        return [IsAuthenticated()]

    def list(self, request, *args, **kwargs):
        """Accounts grouped by role; the caller is left out of ``admins``."""

        users = self.filter_queryset(self.get_queryset())
        grouped: dict[str, list[User]] = {"admins": [], "teachers": [], "students": []}
        for user in users:
            if user.is_admin_role:
                if user.pk != request.user.pk:
                    grouped["admins"].append(user)
            elif user.role == User.Role.TEACHER:
                grouped["teachers"].append(user)
            else:
                grouped["students"].append(user)
        data = {
            key: UserSerializer(items, many=True, context={"request": request}).data
            for key, items in grouped.items()
        }
        return Response(data)

    def perform_create(self, serializer):
        instance = serializer.save()
        log_action(
            "user_created",
            actor=self.request.user,
            model_name="users.User",
            record_id=instance.pk,
            message=f"username={instance.username} role={instance.role}",
        )

    def perform_update(self, serializer):
        instance = serializer.save()
        log_action(
            "user_updated",
            actor=self.request.user,
            model_name="users.User",
            record_id=instance.pk,
            message=f"username={instance.username}",
        )

    @transaction.atomic
    def perform_destroy(self, instance):
        if instance.username == settings.DEFAULT_ADMIN_USERNAME:
            msg = "Cannot delete default admin account"
            raise PermissionDenied(msg)
        picture = instance.profile_picture
        record_id, username = instance.pk, instance.username
        # Sent and received messages go with the account (FK cascade).
        instance.delete()
        delete_media(picture)
        log_action(
            "user_deleted",
            actor=self.request.user,
            model_name="users.User",
            record_id=record_id,
            message=f"username={username}",
        )

    @extend_schema(tags=["Profile"])
    @action(detail=False)
    def me(self, request):
        serializer = UserSerializer(request.user, context={"request": request})
        return Response(status=status.HTTP_200_OK, data=serializer.data)

    @extend_schema(tags=["Profile"], request=ProfileUpdateSerializer)
    @action(detail=False, methods=["put", "patch"])
    def profile(self, request):
        user = request.user
        serializer = ProfileUpdateSerializer(
            user,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            serializer.save()
        return Response(UserSerializer(user, context={"request": request}).data)

    @extend_schema(tags=["Profile"], request=PasswordChangeSerializer)
    @action(detail=False, methods=["post"], url_path="profile/password")
    def change_password(self, request):
        serializer = PasswordChangeSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        request.user.set_password(serializer.validated_data["new_password"])
        request.user.save(update_fields=["password", "updated_at"])
        log_action("password_changed", actor=request.user)
        return Response({"detail": "Password changed successfully"})

    @extend_schema(tags=["Profile"], request=ProfilePictureSerializer)
    @action(detail=False, methods=["post"], url_path="profile/picture")
    def upload_picture(self, request):
        serializer = ProfilePictureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            replace_profile_picture(
                request.user,
                serializer.validated_data["profile_picture"],
            )
        return Response(
            {
                "detail": "Profile picture uploaded successfully",
                "profile_picture": request.user.profile_picture_path,
            },
        )
