from django.contrib.auth import password_validation
from rest_framework import serializers

from school_notify.media.services import delete_media
from school_notify.media.services import store_profile_picture
from school_notify.media.services import validate_image_upload
from school_notify.users.models import User
from school_notify.users.models import phone_validator

USER_READ_FIELDS = [
    "id",
    "username",
    "email",
    "phone",
    "role",
    "first_name",
    "last_name",
    "department",
    "course",
    "year_level",
    "bio",
    "profile_picture",
    "online_status",
    "last_active",
    "created_at",
]


def clean_role_fields(attrs: dict, role: str | None) -> dict:
    """Drop details that do not belong to the account's role.

    Teachers carry a department, students a course and year level.
    """

    if role == User.Role.TEACHER:
        attrs["course"] = ""
        attrs["year_level"] = None
    elif role == User.Role.STUDENT:
        attrs["department"] = ""
    return attrs


def replace_profile_picture(user: User, upload) -> None:
    old = user.profile_picture
    user.profile_picture = store_profile_picture(upload, user.pk)
    user.save(update_fields=["profile_picture", "updated_at"])
    delete_media(old)


class UserSerializer(serializers.ModelSerializer[User]):
    profile_picture = serializers.CharField(
        source="profile_picture_path",
        read_only=True,
    )

    class Meta:
        model = User
        fields = USER_READ_FIELDS
        read_only_fields = USER_READ_FIELDS


class UserSummarySerializer(serializers.ModelSerializer[User]):
    """Display attributes attached to chat messages."""

    profile_picture = serializers.CharField(
        source="profile_picture_path",
        read_only=True,
    )

    class Meta:
        model = User
        fields = ["id", "username", "role", "profile_picture", "online_status"]
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer[User]):
    """Admin create/update of any account."""

    password = serializers.CharField(write_only=True, required=False, min_length=6)
    phone = serializers.CharField(validators=[phone_validator])

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "password",
            "role",
            "first_name",
            "last_name",
            "department",
            "course",
            "year_level",
        ]
        read_only_fields = ["id"]

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": ["This field is required."]})
        role = attrs.get("role") or getattr(self.instance, "role", None)
        if "role" in attrs or self.instance is None:
            clean_role_fields(attrs, role)
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance

    def to_representation(self, instance):
        return UserSerializer(instance, context=self.context).data


class RegisterSerializer(UserWriteSerializer):
    """Self sign-up. Admin accounts are only created by other admins."""

    role = serializers.ChoiceField(
        choices=[User.Role.STUDENT, User.Role.TEACHER],
        default=User.Role.STUDENT,
    )
    username = serializers.CharField(min_length=3, max_length=150)

    def validate_username(self, value: str) -> str:
        value = value.strip()
        if User.objects.filter(username__iexact=value).exists():
            msg = "Username or email already exists"
            raise serializers.ValidationError(msg)
        return value

    def validate_email(self, value: str) -> str:
        if User.objects.filter(email__iexact=value).exists():
            msg = "Username or email already exists"
            raise serializers.ValidationError(msg)
        return value


class ProfileUpdateSerializer(serializers.ModelSerializer[User]):
    """Self-service profile edit, optionally with a new picture."""

    profile_picture = serializers.ImageField(write_only=True, required=False)
    phone = serializers.CharField(validators=[phone_validator], required=False)

    class Meta:
        model = User
        fields = [
            "username",
            "email",
            "phone",
            "first_name",
            "last_name",
            "department",
            "course",
            "year_level",
            "bio",
            "profile_picture",
        ]
        extra_kwargs = {
            "username": {"required": False},
            "email": {"required": False},
        }

    def validate_profile_picture(self, value):
        return validate_image_upload(value)

    def update(self, instance, validated_data):
        upload = validated_data.pop("profile_picture", None)
        clean_role_fields(validated_data, instance.role)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if upload is not None:
            replace_profile_picture(instance, upload)
        return instance

    def to_representation(self, instance):
        return UserSerializer(instance, context=self.context).data


class ProfilePictureSerializer(serializers.Serializer):
    profile_picture = serializers.ImageField()

    def validate_profile_picture(self, value):
        return validate_image_upload(value)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)

    def validate_current_password(self, value: str) -> str:
        user = self.context["request"].user
        if not user.check_password(value):
            msg = "Current password is incorrect"
            raise serializers.ValidationError(msg)
        return value

    def validate_new_password(self, value: str) -> str:
        password_validation.validate_password(value, self.context["request"].user)
        return value
