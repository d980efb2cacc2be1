"""Projection of server status strings onto labels, badge classes and actions."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Union

from rscmp_client.core.models import (
    DecisionType,
    Language,
    Research,
    ResearchStatus,
    ReviewStatus,
)

DEFAULT_BADGE_CLASS = "badge-secondary"
DEFAULT_COLOR = "gray"

ACTION_EDIT = "edit"
ACTION_DELETE = "delete"
ACTION_SUBMIT = "submit"
ACTION_UPLOAD = "upload"

DRAFT_ACTIONS = frozenset({ACTION_EDIT, ACTION_DELETE, ACTION_SUBMIT, ACTION_UPLOAD})

# status -> (css class, color, English label, Arabic label)
RESEARCH_STATUS_TABLE: Dict[str, tuple] = {
    ResearchStatus.DRAFT.value: ("badge-secondary", "gray", "Draft", "مسودة"),
    ResearchStatus.SUBMITTED.value: ("badge-primary", "blue", "Submitted", "مقدم"),
    ResearchStatus.UNDER_REVIEW.value: ("badge-warning", "yellow", "Under Review", "قيد المراجعة"),
    ResearchStatus.REVIEW_COMPLETED.value: ("badge-info", "purple", "Review Completed", "اكتملت المراجعة"),
    ResearchStatus.APPROVED.value: ("badge-success", "green", "Approved", "مقبول"),
    ResearchStatus.REJECTED.value: ("badge-danger", "red", "Rejected", "مرفوض"),
    ResearchStatus.REVISION_REQUIRED.value: ("badge-orange", "orange", "Revision Required", "يتطلب تعديل"),
}

REVIEW_STATUS_TABLE: Dict[str, tuple] = {
    ReviewStatus.PENDING.value: ("badge-warning", "yellow", "Pending", "قيد الانتظار"),
    ReviewStatus.IN_PROGRESS.value: ("badge-primary", "blue", "In Progress", "قيد التنفيذ"),
    ReviewStatus.COMPLETED.value: ("badge-success", "green", "Completed", "مكتملة"),
    ReviewStatus.DECLINED.value: ("badge-danger", "red", "Declined", "مرفوضة"),
    ReviewStatus.RETURNED.value: ("badge-orange", "orange", "Returned", "معادة"),
}

RECOMMENDATION_TABLE: Dict[str, tuple] = {
    DecisionType.APPROVED.value: ("badge-success", "green", "Accept", "قبول"),
    DecisionType.REVISION_REQUIRED.value: ("badge-warning", "yellow", "Revision Required", "يتطلب تعديل"),
    DecisionType.REJECTED.value: ("badge-danger", "red", "Reject", "رفض"),
}

FINAL_STATUSES = frozenset(
    {
        ResearchStatus.APPROVED.value,
        ResearchStatus.REJECTED.value,
        ResearchStatus.REVISION_REQUIRED.value,
    }
)


@dataclass(frozen=True)
class StatusBadge:
    """Display projection of a status string."""

    status: str
    label: str
    css_class: str
    color: str
    known: bool = True


def _project(table: Dict[str, tuple], status: str, language: str) -> StatusBadge:
    entry = table.get(status)
    if entry is None:
        # Unknown server values are shown verbatim with the neutral badge
        return StatusBadge(
            status=status,
            label=str(status),
            css_class=DEFAULT_BADGE_CLASS,
            color=DEFAULT_COLOR,
            known=False,
        )
    css_class, color, label_en, label_ar = entry
    label = label_ar if language == Language.ARABIC.value else label_en
    return StatusBadge(status=status, label=label, css_class=css_class, color=color)


def project_status(status: str, language: str = "en") -> StatusBadge:
    """Map a research status to its localized label and badge class.

    Total over any input string; never raises.
    """
    return _project(RESEARCH_STATUS_TABLE, status, language)


def review_status_badge(status: str, language: str = "en") -> StatusBadge:
    return _project(REVIEW_STATUS_TABLE, status, language)


def recommendation_badge(recommendation: str, language: str = "en") -> StatusBadge:
    return _project(RECOMMENDATION_TABLE, recommendation, language)


def submission_actions(research: Union[Research, str]) -> FrozenSet[str]:
    """Actions the submitter may take; only drafts are mutable."""
    status = research.status if isinstance(research, Research) else research
    if status == ResearchStatus.DRAFT.value:
        return DRAFT_ACTIONS
    return frozenset()


def is_final(status: str) -> bool:
    """True once a decision has been recorded and review results are visible."""
    return status in FINAL_STATUSES


def count_by_status(submissions: Iterable[Research]) -> Dict[str, int]:
    """Counters shown on the researcher dashboard."""
    counts = {"total": 0, "draft": 0, "under_review": 0, "approved": 0, "rejected": 0}
    for research in submissions:
        counts["total"] += 1
        if research.status == ResearchStatus.DRAFT.value:
            counts["draft"] += 1
        elif research.status in (
            ResearchStatus.SUBMITTED.value,
            ResearchStatus.UNDER_REVIEW.value,
        ):
            counts["under_review"] += 1
        elif research.status == ResearchStatus.APPROVED.value:
            counts["approved"] += 1
        elif research.status == ResearchStatus.REJECTED.value:
            counts["rejected"] += 1
    return counts
