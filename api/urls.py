"""
URL configuration for the api app.

All URLs are mounted under /api/ in boot/urls.py.
"""

from django.urls import path

from api import views

app_name = "api"

urlpatterns = [
    path("sessions", views.session_create_view, name="session-create"),
    path("sessions/<str:session_id>", views.session_detail_view, name="session-detail"),
    path("upload-grant", views.upload_grant_view, name="upload-grant"),
    path("submissions", views.submission_create_view, name="submission-create"),
    path(
        "admin/submissions",
        views.admin_submission_list_view,
        name="admin-submission-list",
    ),
]
