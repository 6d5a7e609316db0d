from django.db import models


DEFAULT_CAMPUS_LOCATIONS = [
    ("Barnstaple Campus", "123 Barnstaple Road"),
    ("Wesbury Campus", "456 Wesbury Avenue"),
    ("Rosmead Campus", "789 Rosmead Street"),
]


class CampusLocation(models.Model):
    name = models.CharField(max_length=150, unique=True)
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


def active_locations():
    return CampusLocation.objects.filter(is_active=True).order_by("name")
