from django.utils import timezone
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.generics import CreateAPIView
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.views import TokenVerifyView

from school_notify.audit.utils import log_action

from .serializers import RegisterSerializer
from .serializers import UserSerializer


def issue_tokens(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


@extend_schema(tags=["Authentication"])
class RegisterView(CreateAPIView):
    """Create a student or teacher account and sign it in."""

    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_action(
            "user_registered",
            actor=user,
            model_name="users.User",
            record_id=user.pk,
            message=f"role={user.role}",
        )
        body = {
            "detail": "User registered successfully",
            **issue_tokens(user),
            "user": UserSerializer(user, context={"request": request}).data,
        }
        return Response(body, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Authentication"], request=None)
class LogoutView(APIView):
    """Mark the caller offline. Tokens simply expire client side."""

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        user = request.user
        user.online_status = False
        user.last_active = timezone.now()
        user.save(update_fields=["online_status", "last_active"])
        return Response({"detail": "Logout successful"})


# Annotated JWT views for proper schema tag grouping
@extend_schema_view(post=extend_schema(tags=["JWT Authentication"]))
class JWTCreateView(TokenObtainPairView):
    pass


@extend_schema_view(post=extend_schema(tags=["JWT Authentication"]))
class JWTRefreshView(TokenRefreshView):
    pass


@extend_schema_view(post=extend_schema(tags=["JWT Authentication"]))
class JWTVerifyView(TokenVerifyView):
    pass
