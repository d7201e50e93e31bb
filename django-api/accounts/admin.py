from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import User


@admin.register(User)
class TurnstileUserAdmin(UserAdmin):
    list_display = ["username", "email", "role", "department", "is_staff"]
    list_filter = ["role", "is_staff", "is_superuser"]
    fieldsets = UserAdmin.fieldsets + (
        ("Profile", {"fields": ("role", "department", "bio", "profile_picture")}),
    )
