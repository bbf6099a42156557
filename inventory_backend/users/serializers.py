from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# ---------------- CREATE (ADMIN) ----------------
class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "name",
            "role",
        ]

    def validate_email(self, value):
        value = User.objects.normalize_email(value.strip())
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data.get("name", ""),
            role=validated_data.get("role", User.ROLE_STAFF),
        )


# ---------------- UPDATE ----------------
class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Admin edits of any user. Non-admins go through ProfileUpdateSerializer.
    """

    password = serializers.CharField(
        write_only=True,
        required=False,
        validators=[validate_password],
        style={"input_type": "password"},
    )

    class Meta:
        model = User
        fields = [
            "email",
            "name",
            "role",
            "is_active",
            "password",
        ]

    def validate_email(self, value):
        value = User.objects.normalize_email(value.strip())
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.full_clean(exclude=["password"])
        instance.save()
        return instance


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Self-service profile edit.

    Changing the password requires the current one.
    """

    name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    current_password = serializers.CharField(
        required=False,
        write_only=True,
        style={"input_type": "password"},
    )
    new_password = serializers.CharField(
        required=False,
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )

    def validate(self, attrs):
        new_password = attrs.get("new_password")
        if new_password:
            current = attrs.get("current_password") or ""
            if not self.instance.check_password(current):
                raise serializers.ValidationError(
                    {"current_password": "Current password is incorrect."}
                )
        return attrs

    def update(self, instance, validated_data):
        if "name" in validated_data:
            instance.name = validated_data["name"].strip()
        if validated_data.get("new_password"):
            instance.set_password(validated_data["new_password"])
        instance.save()
        return instance


# ---------------- LOGIN (INPUT ONLY) ----------------
class LoginSerializer(serializers.Serializer):
    """
    Input validation only.
    Authentication is handled in the view.
    """

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )
