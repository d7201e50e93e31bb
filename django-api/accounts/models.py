from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_ADMIN = "admin"
    ROLE_ORGANIZER = "organizer"
    ROLE_COORDINATOR = "coordinator"

    ROLE_CHOICES = (
        (ROLE_COORDINATOR, "Coordinator"),
        (ROLE_ORGANIZER, "Organizer"),
        (ROLE_ADMIN, "Admin"),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_COORDINATOR,
    )
    department = models.CharField(max_length=120, default="Not specified")
    bio = models.TextField(blank=True, default="")
    profile_picture = models.CharField(max_length=1024, blank=True, default="")

    def __str__(self):
        return self.username
