"""Data models mirroring the RSCMP REST API payloads."""

from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rscmp_client.utils.logging_config import get_logger

# Configure structured logging
logger = get_logger(__name__)

T = TypeVar("T")


class Role(str, Enum):
    PUBLIC = "Public"
    REVIEWER = "Reviewer"
    CHAIRMAN = "Chairman"
    ADMIN = "Admin"


class ResearchStatus(str, Enum):
    """Lifecycle of a research submission, driven by server transitions."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "UnderReview"
    REVIEW_COMPLETED = "ReviewCompleted"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    REVISION_REQUIRED = "RevisionRequired"


class ReviewStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    DECLINED = "Declined"
    RETURNED = "Returned"


class DecisionType(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"
    REVISION_REQUIRED = "RevisionRequired"


class ContactMessageStatus(str, Enum):
    NEW = "New"
    READ = "Read"
    REPLIED = "Replied"
    ARCHIVED = "Archived"


class Language(str, Enum):
    ENGLISH = "en"
    ARABIC = "ar"


def _lower_first(key: str) -> str:
    return key[:1].lower() + key[1:] if key else key


class ApiModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        """Serialize to the JSON body the API expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class User(ApiModel):
    id: str
    email: str
    phone_number: Optional[str] = None
    full_name_en: str = ""
    full_name_ar: str = ""
    institution: Optional[str] = None
    preferred_language: str = Language.ENGLISH.value
    roles: List[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def display_name(self, language: str = "en") -> str:
        if language == Language.ARABIC.value and self.full_name_ar:
            return self.full_name_ar
        return self.full_name_en or self.email


class AuthResponse(ApiModel):
    access_token: str
    refresh_token: str
    expires_at: Optional[str] = None
    user: User


class ReviewCriteria(ApiModel):
    id: str
    name_en: str = ""
    name_ar: str = ""
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    max_score: int = 10
    min_score: int = 0
    weight: float = 1.0
    order: int = 1


class Conference(ApiModel):
    id: str
    name_en: str = ""
    name_ar: str = ""
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    submission_deadline: Optional[str] = None
    review_deadline: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    is_active: bool = False
    accepting_submissions: bool = False
    research_count: int = 0
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    review_criteria: List[ReviewCriteria] = Field(default_factory=list)


class Author(ApiModel):
    full_name_en: str
    full_name_ar: str = ""
    email: str
    institution: Optional[str] = None
    is_corresponding: bool = False


class ResearchFile(ApiModel):
    id: str
    file_name: str = ""
    original_file_name: str = ""
    file_type: str = ""
    file_size: int = 0
    uploaded_at: Optional[str] = None


class ResearchConference(ApiModel):
    """Conference summary embedded in a research payload."""

    id: str
    name_en: str = ""
    name_ar: str = ""
    review_criteria: List[ReviewCriteria] = Field(default_factory=list)


class FileUploadResponse(ApiModel):
    file_id: str
    file_name: str = ""
    file_size: int = 0
    file_type: str = ""


class Research(ApiModel):
    """A research submission as the server reports it."""

    id: str
    title_en: str = ""
    title_ar: str = ""
    abstract_en: Optional[str] = None
    abstract_ar: Optional[str] = None
    keywords: Optional[str] = None
    topic_area: Optional[str] = None
    # Raw server string; unknown values must survive parsing
    status: str = ResearchStatus.DRAFT.value
    submission_number: Optional[str] = None
    submitted_at: Optional[str] = None
    conference_id: Optional[str] = None
    conference_name: Optional[str] = None
    authors: List[Author] = Field(default_factory=list)
    files: List[ResearchFile] = Field(default_factory=list)
    conference: Optional[ResearchConference] = None

    @property
    def is_draft(self) -> bool:
        return self.status == ResearchStatus.DRAFT.value

    @property
    def review_criteria(self) -> List[ReviewCriteria]:
        if self.conference is None:
            return []
        return self.conference.review_criteria

    def title(self, language: str = "en") -> str:
        if language == Language.ARABIC.value and self.title_ar:
            return self.title_ar
        return self.title_en


class ResearchCreateRequest(ApiModel):
    conference_id: str
    title_en: str
    title_ar: str
    abstract_en: Optional[str] = None
    abstract_ar: Optional[str] = None
    keywords: Optional[str] = None
    topic_area: Optional[str] = None
    authors: List[Author] = Field(default_factory=list)


class ReviewScore(ApiModel):
    criteria_id: str
    criteria_name: Optional[str] = None
    score: float
    comment: Optional[str] = None


class Review(ApiModel):
    id: str
    research_id: str
    research_title: Optional[str] = None
    status: str = ReviewStatus.PENDING.value
    assigned_at: Optional[str] = None
    due_date: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    overall_score: Optional[float] = None
    recommendation: Optional[str] = None
    comments_to_author: Optional[str] = None
    comments_to_chairman: Optional[str] = None
    chairman_feedback: Optional[str] = None
    scores: List[ReviewScore] = Field(default_factory=list)

    @property
    def is_editable(self) -> bool:
        """Reviewers may (re)work a review until it is completed or declined."""
        return self.status in (
            ReviewStatus.IN_PROGRESS.value,
            ReviewStatus.RETURNED.value,
        )


class ReviewSubmitRequest(ApiModel):
    scores: List[ReviewScore]
    comments_to_author: Optional[str] = None
    comments_to_chairman: Optional[str] = None
    recommendation: DecisionType


class Decision(ApiModel):
    id: str
    research_id: str
    research_title: Optional[str] = None
    decision: str
    justification: Optional[str] = None
    comments_to_author: Optional[str] = None
    decided_at: Optional[str] = None
    chairman_name: Optional[str] = None


class DecisionCreateRequest(ApiModel):
    research_id: str
    decision: DecisionType
    justification: Optional[str] = None
    comments_to_author: Optional[str] = None


class Notification(ApiModel):
    id: str
    title_en: str = ""
    title_ar: str = ""
    message_en: str = ""
    message_ar: str = ""
    is_read: bool = False
    link: Optional[str] = None
    created_at: Optional[str] = None

    def title(self, language: str = "en") -> str:
        if language == Language.ARABIC.value and self.title_ar:
            return self.title_ar
        return self.title_en

    def message(self, language: str = "en") -> str:
        if language == Language.ARABIC.value and self.message_ar:
            return self.message_ar
        return self.message_en


class ContactMessage(ApiModel):
    id: str
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""
    status: str = ContactMessageStatus.NEW.value
    created_at: Optional[str] = None
    response: Optional[str] = None
    responded_at: Optional[str] = None


class ContactCreateRequest(ApiModel):
    name: str
    email: str
    subject: str
    message: str


class LoginRequest(ApiModel):
    email: str
    password: str


class RegisterRequest(ApiModel):
    email: str
    password: str
    confirm_password: str
    full_name_en: str
    full_name_ar: str
    phone_number: str
    institution: Optional[str] = None
    preferred_language: str = Language.ENGLISH.value


class CreateUserByAdminRequest(ApiModel):
    email: str
    password: str
    full_name_en: str
    full_name_ar: str
    phone_number: str
    institution: Optional[str] = None
    role: str
    preferred_language: str = Language.ENGLISH.value


class AuditLog(ApiModel):
    id: Optional[str] = None
    action: str = ""
    entity_type: str = ""
    entity_id: Optional[str] = None
    user_name: Optional[str] = None
    created_at: Optional[str] = None


class SystemSetting(ApiModel):
    key: str
    value: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class RecentActivity(ApiModel):
    action: str
    entity_type: str
    created_at: Optional[str] = None
    user_name: Optional[str] = None


class ReviewerDashboard(ApiModel):
    pending_reviews: int = 0
    completed_reviews: int = 0
    total_assigned: int = 0
    upcoming_reviews: List[Review] = Field(default_factory=list)


class ChairmanDashboard(ApiModel):
    pending_decisions: int = 0
    approved_researches: int = 0
    rejected_researches: int = 0
    total_researches: int = 0
    pending_researches: List[Research] = Field(default_factory=list)


class AdminDashboard(ApiModel):
    total_conferences: int = 0
    active_conferences: int = 0
    total_researches: int = 0
    pending_researches: int = 0
    total_users: int = 0
    total_reviewers: int = 0
    unread_messages: int = 0
    recent_activities: List[RecentActivity] = Field(default_factory=list)


class PagedResult(ApiModel, Generic[T]):
    """Uniform pagination envelope returned by every listing endpoint."""

    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10
    total_pages: int = 0

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


class _PascalTolerantModel(ApiModel):
    """Accepts payloads serialized with PascalCase keys as well as camelCase."""

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {_lower_first(k): v for k, v in data.items()}
        return data


class DecisionReviewScore(_PascalTolerantModel):
    criteria_id: str
    criteria_name_en: Optional[str] = None
    criteria_name_ar: Optional[str] = None
    score: float = 0
    max_score: Optional[float] = None
    comment: Optional[str] = None


class DecisionReview(_PascalTolerantModel):
    """A completed review as shown to the chairman."""

    id: str
    reviewer_name: Optional[str] = None
    overall_score: Optional[float] = None
    recommendation: Optional[str] = None
    comments_to_chairman: Optional[str] = None
    comments_to_author: Optional[str] = None
    completed_at: Optional[str] = None
    status: str = ReviewStatus.COMPLETED.value
    is_chair_approved: bool = False
    scores: List[DecisionReviewScore] = Field(default_factory=list)


class DecisionSummary(_PascalTolerantModel):
    average_score: Optional[float] = None
    review_count: int = 0
    approve_recommendations: int = 0
    reject_recommendations: int = 0
    revision_recommendations: int = 0


class DecisionResearch(_PascalTolerantModel):
    id: str
    title_en: str = ""
    title_ar: str = ""
    abstract_en: Optional[str] = None
    abstract_ar: Optional[str] = None
    submission_number: Optional[str] = None
    status: str = ResearchStatus.REVIEW_COMPLETED.value
    conference_name: Optional[str] = None


class DecisionContext(_PascalTolerantModel):
    """Everything the chairman decision page needs for one research."""

    research: DecisionResearch
    reviews: List[DecisionReview] = Field(default_factory=list)
    summary: DecisionSummary = Field(default_factory=DecisionSummary)
    existing_decision: Optional[Decision] = None

    @field_validator("existing_decision", mode="before")
    @classmethod
    def _normalize_decision(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {_lower_first(k): v for k, v in value.items()}
        return value

    @property
    def is_decided(self) -> bool:
        return self.existing_decision is not None
