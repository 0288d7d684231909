from django.db import models
from django.conf import settings


class ProfileField(models.Model):
    """A site defined extra field on user profiles."""
    shortname = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=255)
    sortorder = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['sortorder', 'id']

    def __str__(self):
        return self.name


class ProfileFieldData(models.Model):
    field = models.ForeignKey(ProfileField, on_delete=models.CASCADE, related_name='data')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile_field_data')
    data = models.TextField(blank=True)

    class Meta:
        unique_together = ('field', 'user')

    def __str__(self):
        return f"{self.field.shortname}: {self.user}"
