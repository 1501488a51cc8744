from django.db import models


class Media(models.Model):
    """Binary image kept in the database as base64 text.

    Referenced from other records by the path ``media/{id}``.
    """

    data = models.TextField()
    mime_type = models.CharField(max_length=50)
    filename = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "media"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.filename} ({self.mime_type})"

    @property
    def path(self) -> str:
        return f"media/{self.pk}"
