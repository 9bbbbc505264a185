"""Admin query service: paginated submission listing."""

from dataclasses import dataclass

from common.utils import apply_date_range
from django.core.paginator import Paginator
from django.db.models import Prefetch

from submissions.models import Photo, PhotoVariant, Submission

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class SubmissionPage:
    submissions: list
    total: int
    page: int
    limit: int
    total_pages: int


def clamp_limit(limit):
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, limit))


def list_submissions(page=1, limit=None, status=None, date_from=None, date_to=None):
    """Return one page of submissions, newest first, with their photos.

    Each submission has ``photos`` prefetched (active only, slot order),
    and each photo its ``variants``.

    Args:
        page: 1-based page number. Out-of-range pages return the last page.
        limit: Page size, clamped to 1..100.
        status: Optional status filter.
        date_from: Optional inclusive lower bound on the creation date.
        date_to: Optional inclusive upper bound on the creation date.
    """
    limit = clamp_limit(limit)

    queryset = Submission.objects.order_by("-created_at", "-pk")
    if status:
        queryset = queryset.filter(status=status)
    queryset = apply_date_range(queryset, date_from, date_to)
    queryset = queryset.prefetch_related(
        Prefetch(
            "photos",
            queryset=Photo.objects.filter(status=Photo.Status.ACTIVE)
            .order_by("sort_order")
            .prefetch_related(
                Prefetch(
                    "variants",
                    queryset=PhotoVariant.objects.filter(kind=PhotoVariant.Kind.ORIGINAL),
                )
            ),
        )
    )

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    return SubmissionPage(
        submissions=list(page_obj.object_list),
        total=paginator.count,
        page=page_obj.number,
        limit=limit,
        total_pages=paginator.num_pages if paginator.count else 0,
    )
