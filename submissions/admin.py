"""Admin configuration for submission models."""

from django.contrib import admin

from submissions.models import Photo, PhotoVariant, Submission
from submissions.services.review import transition_review_status


class PhotoInline(admin.TabularInline):
    model = Photo
    extra = 0
    fields = ("sort_order", "original_filename", "title", "shoot_date", "status")
    readonly_fields = fields
    can_delete = False
    show_change_link = True


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """Admin interface for submissions."""

    list_display = (
        "reference",
        "work_title",
        "full_name",
        "prefecture",
        "status",
        "created_at",
    )
    list_filter = ("status", "gender", "prefecture", "created_at")
    search_fields = ("reference", "work_title", "last_name", "first_name", "email")
    readonly_fields = (
        "pk",
        "session",
        "reference",
        "status",
        "created_at",
        "updated_at",
    )
    list_select_related = ("session",)
    date_hierarchy = "created_at"
    inlines = [PhotoInline]
    actions = ["approve_submissions", "reject_submissions"]

    @admin.action(description="Approve selected submissions")
    def approve_submissions(self, request, queryset):
        updated = transition_review_status(queryset, Submission.Status.APPROVED)
        self.message_user(request, f"{updated} submission(s) approved.")

    @admin.action(description="Reject selected submissions")
    def reject_submissions(self, request, queryset):
        updated = transition_review_status(queryset, Submission.Status.REJECTED)
        self.message_user(request, f"{updated} submission(s) rejected.")


@admin.register(Photo)
class PhotoAdmin(admin.ModelAdmin):
    """Admin interface for committed photos."""

    list_display = ("original_filename", "submission", "sort_order", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("original_filename", "title", "submission__reference")
    readonly_fields = ("pk", "submission", "draft", "created_at", "updated_at")
    list_select_related = ("submission",)


@admin.register(PhotoVariant)
class PhotoVariantAdmin(admin.ModelAdmin):
    """Admin interface for photo variants."""

    list_display = ("pk", "photo", "kind", "content_type", "size_bytes", "is_ready")
    list_filter = ("kind", "is_ready")
    search_fields = ("object_key", "photo__submission__reference")
    readonly_fields = ("pk", "photo", "object_key", "generated_at", "created_at")
    list_select_related = ("photo",)
