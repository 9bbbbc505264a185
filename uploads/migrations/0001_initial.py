import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="UploadSession",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="created at"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("email", models.EmailField(blank=True, max_length=254)),
                (
                    "state",
                    models.CharField(
                        choices=[
                            ("open", "Open"),
                            ("committed", "Committed"),
                            ("expired", "Expired"),
                        ],
                        default="open",
                        max_length=20,
                    ),
                ),
                ("expires_at", models.DateTimeField()),
            ],
            options={
                "verbose_name": "upload session",
                "verbose_name_plural": "upload sessions",
                "db_table": "upload_session",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["state", "expires_at"],
                        name="upload_session_state_exp_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DraftImage",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, verbose_name="created at"
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("object_key", models.CharField(max_length=512)),
                ("original_filename", models.CharField(max_length=255)),
                ("content_type", models.CharField(blank=True, max_length=100)),
                (
                    "size_bytes",
                    models.PositiveBigIntegerField(
                        blank=True,
                        help_text="File size in bytes, as declared by the client",
                        null=True,
                    ),
                ),
                (
                    "slot",
                    models.PositiveSmallIntegerField(help_text="Sort position 0..4"),
                ),
                (
                    "rotation",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        choices=[(0, "0°"), (90, "90°"), (180, "180°"), (270, "270°")],
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("final", "Final")],
                        default="draft",
                        max_length=20,
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="drafts",
                        to="uploads.uploadsession",
                    ),
                ),
            ],
            options={
                "verbose_name": "draft image",
                "verbose_name_plural": "draft images",
                "db_table": "draft_image",
                "ordering": ["session", "slot"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("session", "slot"),
                        name="unique_draft_image_session_slot",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(slot__lte=4),
                        name="draft_image_slot_range",
                    ),
                ],
            },
        ),
    ]
