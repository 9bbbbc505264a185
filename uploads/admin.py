"""Admin configuration for upload models."""

from django.contrib import admin

from uploads.models import DraftImage, UploadSession


class DraftImageInline(admin.TabularInline):
    model = DraftImage
    extra = 0
    fields = ("slot", "original_filename", "content_type", "size_bytes", "status")
    readonly_fields = fields
    can_delete = False


@admin.register(UploadSession)
class UploadSessionAdmin(admin.ModelAdmin):
    """Admin interface for upload sessions."""

    list_display = ("pk", "email", "state", "expires_at", "created_at")
    list_filter = ("state", "created_at")
    search_fields = ("pk", "email")
    readonly_fields = ("pk", "state", "expires_at", "created_at", "updated_at")
    date_hierarchy = "created_at"
    inlines = [DraftImageInline]


@admin.register(DraftImage)
class DraftImageAdmin(admin.ModelAdmin):
    """Admin interface for draft images."""

    list_display = (
        "original_filename",
        "session",
        "slot",
        "content_type",
        "size_bytes",
        "status",
        "created_at",
    )
    list_filter = ("status", "content_type", "created_at")
    search_fields = ("original_filename", "object_key", "session__pk")
    readonly_fields = ("pk", "object_key", "status", "created_at", "updated_at")
    list_select_related = ("session",)
