"""Upload session and draft image models for presigned direct uploads."""

import uuid

from common.models import TimeStampedModel
from django.db import models


class UploadSession(TimeStampedModel):
    """Time-boxed grouping of draft uploads for one pending submission.

    State lifecycle (forward only):
        open → committed (submission commit)
        open → expired (observed past ``expires_at``)

    Transitions are always issued as conditional UPDATEs guarded by
    ``state='open'``; the affected-row count decides who won.
    """

    class State(models.TextChoices):
        OPEN = "open", "Open"
        COMMITTED = "committed", "Committed"
        EXPIRED = "expired", "Expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=254, blank=True)
    state = models.CharField(
        max_length=20,
        choices=State.choices,
        default=State.OPEN,
    )
    expires_at = models.DateTimeField()

    class Meta:
        db_table = "upload_session"
        verbose_name = "upload session"
        verbose_name_plural = "upload sessions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["state", "expires_at"],
                name="upload_session_state_exp_idx",
            ),
        ]

    def __str__(self):
        return f"Session {self.pk} ({self.get_state_display()})"

    def is_past_deadline(self, now):
        return now > self.expires_at

    def effective_state(self, now):
        """State as observed at ``now``: a stale open session reads as expired."""
        if self.state == self.State.OPEN and self.is_past_deadline(now):
            return self.State.EXPIRED
        return self.state


class DraftImage(TimeStampedModel):
    """Presigned upload grant recorded against a session slot.

    One row per (session, slot): re-picking a file for the same slot
    overwrites the key and file details in place.

    Status lifecycle:
        draft → final (consumed by a submission commit)
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        FINAL = "final", "Final"

    class Rotation(models.IntegerChoices):
        NONE = 0, "0°"
        RIGHT = 90, "90°"
        UPSIDE_DOWN = 180, "180°"
        LEFT = 270, "270°"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.ForeignKey(
        "UploadSession",
        on_delete=models.CASCADE,
        related_name="drafts",
    )
    object_key = models.CharField(max_length=512)
    original_filename = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100, blank=True)
    size_bytes = models.PositiveBigIntegerField(
        null=True, blank=True, help_text="File size in bytes, as declared by the client"
    )
    slot = models.PositiveSmallIntegerField(help_text="Sort position 0..4")
    rotation = models.PositiveSmallIntegerField(
        choices=Rotation.choices, null=True, blank=True
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    class Meta:
        db_table = "draft_image"
        verbose_name = "draft image"
        verbose_name_plural = "draft images"
        ordering = ["session", "slot"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "slot"],
                name="unique_draft_image_session_slot",
            ),
            models.CheckConstraint(
                condition=models.Q(slot__lte=4),
                name="draft_image_slot_range",
            ),
        ]

    def __str__(self):
        return f"{self.original_filename} (slot {self.slot}, {self.get_status_display()})"
