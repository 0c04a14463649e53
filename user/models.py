from django.db import models
from django.contrib.auth.models import User


class Role(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    MANAGER = 'manager', 'Manager'
    MEMBER = 'member', 'Member'
    DIRECTOR = 'director', 'Director'


class UserProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    profile_picture = models.ImageField(upload_to='profile_pics/', blank=True, null=True)

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    @property
    def avatar_url(self):
        if self.profile_picture:
            return self.profile_picture.url
        return None
