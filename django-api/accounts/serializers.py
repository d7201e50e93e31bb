from django.contrib.auth import password_validation
from django.db import IntegrityError, transaction
from rest_framework import serializers

from accounts.models import User

# Admin accounts are granted through Django admin, never self-assigned.
SIGNUP_ROLES = (User.ROLE_COORDINATOR, User.ROLE_ORGANIZER)


class SignupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(max_length=150)
    password = serializers.CharField(write_only=True)
    department = serializers.CharField(max_length=120)
    role = serializers.ChoiceField(choices=SIGNUP_ROLES, default=User.ROLE_COORDINATOR)

    def validate_email(self, value):
        email = User.objects.normalize_email(value).lower()
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(
            username__iexact=email
        ).exists():
            raise serializers.ValidationError("User with this email already exists")
        return email

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        first_name, _, last_name = validated_data["name"].strip().partition(" ")
        try:
            with transaction.atomic():
                return User.objects.create_user(
                    username=validated_data["email"],
                    email=validated_data["email"],
                    password=validated_data["password"],
                    first_name=first_name,
                    last_name=last_name.strip(),
                    department=validated_data["department"].strip(),
                    role=validated_data["role"],
                )
        except IntegrityError as exc:
            raise serializers.ValidationError(
                {"email": ["User with this email already exists"]}
            ) from exc


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "name", "department", "role"]
