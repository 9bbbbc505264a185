"""Submission, photo and photo variant models created by a session commit."""

import uuid

from common.models import TimeStampedModel
from django.db import models


class Submission(TimeStampedModel):
    """One contest entry, created atomically from exactly one upload session.

    Status lifecycle:
        submitted → approved
        submitted → rejected
    Only ``submitted`` is ever written at creation; review transitions
    happen through the admin.
    """

    class Status(models.TextChoices):
        SUBMITTED = "submitted", "Submitted"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session = models.OneToOneField(
        "uploads.UploadSession",
        on_delete=models.PROTECT,
        related_name="submission",
    )
    reference = models.CharField(max_length=32, unique=True)

    # Work
    work_title = models.CharField(max_length=200)
    episode = models.TextField()

    # Applicant
    last_name = models.CharField(max_length=100)
    first_name = models.CharField(max_length=100)
    last_name_kana = models.CharField(max_length=100)
    first_name_kana = models.CharField(max_length=100)
    pen_name = models.CharField(max_length=100, blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices)
    birth_date = models.DateField()

    # Contacts
    email = models.EmailField(max_length=254)
    phone = models.CharField(max_length=20)
    postal_code = models.CharField(max_length=8)
    prefecture = models.CharField(max_length=10)
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)

    agreed_terms = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SUBMITTED,
    )

    class Meta:
        db_table = "submission"
        verbose_name = "submission"
        verbose_name_plural = "submissions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["status", "-created_at"],
                name="submission_status_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(agreed_terms=1),
                name="submission_agreed_terms",
            ),
        ]

    def __str__(self):
        return f"{self.work_title} ({self.reference})"

    @property
    def full_name(self):
        return f"{self.last_name} {self.first_name}"


class Photo(TimeStampedModel):
    """A committed photo, one per consumed draft image."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    submission = models.ForeignKey(
        "Submission",
        on_delete=models.CASCADE,
        related_name="photos",
    )
    draft = models.OneToOneField(
        "uploads.DraftImage",
        on_delete=models.PROTECT,
        related_name="photo",
    )
    original_filename = models.CharField(max_length=255)
    title = models.CharField(max_length=200, blank=True)
    caption = models.TextField(blank=True)
    shoot_date = models.DateField(null=True, blank=True)
    shoot_location = models.CharField(max_length=200, blank=True)
    sort_order = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    class Meta:
        db_table = "photo"
        verbose_name = "photo"
        verbose_name_plural = "photos"
        ordering = ["submission", "sort_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["submission", "sort_order"],
                name="unique_photo_submission_sort_order",
            ),
        ]

    def __str__(self):
        return f"{self.original_filename} (#{self.sort_order})"


class PhotoVariant(models.Model):
    """A rendition of a photo. Only the original is produced at commit."""

    class Kind(models.TextChoices):
        ORIGINAL = "original", "Original"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    photo = models.ForeignKey(
        "Photo",
        on_delete=models.CASCADE,
        related_name="variants",
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    object_key = models.CharField(max_length=512)
    content_type = models.CharField(max_length=100, blank=True)
    size_bytes = models.PositiveBigIntegerField(null=True, blank=True)
    width_px = models.PositiveIntegerField(null=True, blank=True)
    height_px = models.PositiveIntegerField(null=True, blank=True)
    is_ready = models.BooleanField(default=True)
    generated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(verbose_name="created at")

    class Meta:
        db_table = "photo_variant"
        verbose_name = "photo variant"
        verbose_name_plural = "photo variants"
        constraints = [
            models.UniqueConstraint(
                fields=["photo", "kind"],
                name="unique_photo_variant_kind",
            ),
        ]

    def __str__(self):
        return f"{self.photo_id} [{self.kind}]"
