"""Shared abstract base models used across all apps."""

from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Abstract base providing consistent created_at/updated_at timestamps.

    ``created_at`` is a plain default, so services may stamp it with the
    same ``now`` they use for expiry arithmetic.
    """

    created_at = models.DateTimeField(default=timezone.now, verbose_name="created at")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="updated at")

    class Meta:
        abstract = True
