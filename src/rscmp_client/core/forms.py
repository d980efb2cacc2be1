"""Form state for review scoring and chairman decisions, plus advisory input schemas.

Validation here is client-side only; the server remains the authority.
"""

import re
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

import numpy as np
from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from rscmp_client.client.errors import ValidationFailed
from rscmp_client.config.constants import (
    MSG_DECISION_EXISTS,
    MSG_INCOMPLETE_SCORES,
    ROLE_CHAIRMAN,
    ROLE_REVIEWER,
)
from rscmp_client.core.models import (
    DecisionContext,
    DecisionCreateRequest,
    DecisionReview,
    DecisionType,
    Review,
    ReviewCriteria,
    ReviewScore,
    ReviewSubmitRequest,
)
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)

REVIEW_APPROVE = "approve"
REVIEW_RETURN = "return"


class ReviewForm:
    """Per-criterion scores, comments and a recommendation for one review."""

    def __init__(self, criteria: List[ReviewCriteria], existing: Optional[Review] = None):
        self.criteria = list(criteria)
        self.scores: Dict[str, Optional[float]] = {c.id: None for c in self.criteria}
        self.comments: Dict[str, Optional[str]] = {c.id: None for c in self.criteria}
        self.comments_to_author = ""
        self.comments_to_chairman = ""
        self.recommendation = DecisionType.APPROVED.value

        if existing is not None:
            for score in existing.scores:
                if score.criteria_id in self.scores:
                    self.scores[score.criteria_id] = score.score
                    self.comments[score.criteria_id] = score.comment
            self.comments_to_author = existing.comments_to_author or ""
            self.comments_to_chairman = existing.comments_to_chairman or ""
            if existing.recommendation:
                self.recommendation = existing.recommendation

    def _criterion(self, criteria_id: str) -> ReviewCriteria:
        for criterion in self.criteria:
            if criterion.id == criteria_id:
                return criterion
        raise KeyError(f"Unknown criterion '{criteria_id}'")

    def set_score(self, criteria_id: str, score: float, comment: Optional[str] = None) -> None:
        """Record a score; it must lie within the criterion's configured bounds."""
        criterion = self._criterion(criteria_id)
        if not criterion.min_score <= score <= criterion.max_score:
            raise ValueError(
                f"Score {score} out of range [{criterion.min_score}, {criterion.max_score}] "
                f"for '{criterion.name_en}'"
            )
        self.scores[criteria_id] = score
        if comment is not None:
            self.comments[criteria_id] = comment

    def clear_score(self, criteria_id: str) -> None:
        self._criterion(criteria_id)
        self.scores[criteria_id] = None

    def set_recommendation(self, recommendation: str) -> None:
        self.recommendation = DecisionType(recommendation).value

    @property
    def missing_criteria(self) -> List[ReviewCriteria]:
        return [
            c for c in self.criteria
            if self.scores[c.id] is None or self.scores[c.id] < 0
        ]

    @property
    def can_submit(self) -> bool:
        return not self.missing_criteria

    def preview_average(self) -> Optional[float]:
        """Unweighted mean of the entered scores, for display only."""
        entered = [s for s in self.scores.values() if s is not None]
        if not entered:
            return None
        return float(np.mean(entered))

    def to_request(self) -> ReviewSubmitRequest:
        missing = self.missing_criteria
        if missing:
            raise ValidationFailed(
                {c.name_en or c.id: [MSG_INCOMPLETE_SCORES] for c in missing}
            )
        scores = [
            ReviewScore(
                criteria_id=c.id,
                criteria_name=c.name_en or None,
                score=self.scores[c.id],
                comment=self.comments[c.id] or None,
            )
            for c in self.criteria
        ]
        return ReviewSubmitRequest(
            scores=scores,
            comments_to_author=self.comments_to_author or None,
            comments_to_chairman=self.comments_to_chairman or None,
            recommendation=DecisionType(self.recommendation),
        )


class DecisionForm:
    """Chairman's final ruling on one research.

    Every completed review is handled locally (approved or returned) before a
    decision is taken. Unhandled reviews produce a warning, not a hard block.
    """

    def __init__(self, context: DecisionContext):
        self.context = context
        self.review_actions: Dict[str, str] = {}
        self.decision: Optional[str] = None
        self.justification = ""
        self.comments_to_author = ""
        for review in context.reviews:
            if review.is_chair_approved:
                self.review_actions[review.id] = REVIEW_APPROVE

        existing = context.existing_decision
        if existing is not None:
            self.decision = existing.decision
            self.justification = existing.justification or ""
            self.comments_to_author = existing.comments_to_author or ""

    @property
    def is_read_only(self) -> bool:
        return self.context.is_decided

    def _ensure_editable(self) -> None:
        if self.is_read_only:
            raise ValueError("A decision has already been made for this research")

    def _review(self, review_id: str) -> DecisionReview:
        for review in self.context.reviews:
            if review.id == review_id:
                return review
        raise KeyError(f"Unknown review '{review_id}'")

    def approve_review(self, review_id: str) -> None:
        self._ensure_editable()
        self._review(review_id)
        self.review_actions[review_id] = REVIEW_APPROVE

    def return_review(self, review_id: str) -> None:
        self._ensure_editable()
        self._review(review_id)
        self.review_actions[review_id] = REVIEW_RETURN

    def handle_review(self, review_id: str, choice: Optional[str]) -> None:
        """Apply the chairman's pick for one review; ``None`` leaves it unhandled."""
        if choice is None:
            return
        if choice == REVIEW_APPROVE:
            self.approve_review(review_id)
        elif choice == REVIEW_RETURN:
            self.return_review(review_id)
        else:
            raise ValueError(f"Unknown review action '{choice}'")

    def set_decision(self, decision: str) -> None:
        self._ensure_editable()
        self.decision = DecisionType(decision).value

    @property
    def unhandled_reviews(self) -> List[DecisionReview]:
        return [r for r in self.context.reviews if r.id not in self.review_actions]

    @property
    def all_reviews_handled(self) -> bool:
        return not self.unhandled_reviews

    @property
    def warning(self) -> Optional[str]:
        pending = len(self.unhandled_reviews)
        if pending and not self.is_read_only:
            return f"{pending} review(s) not yet approved or returned"
        return None

    @property
    def can_submit(self) -> bool:
        return not self.is_read_only and self.decision is not None

    def to_request(self) -> DecisionCreateRequest:
        if self.is_read_only:
            raise ValidationFailed({"decision": [MSG_DECISION_EXISTS]})
        if self.decision is None:
            raise ValidationFailed({"decision": ["يجب اختيار القرار | A decision is required"]})
        if self.unhandled_reviews:
            logger.warning(
                "Submitting decision with unhandled reviews",
                research_id=self.context.research.id,
                unhandled=len(self.unhandled_reviews),
            )
        return DecisionCreateRequest(
            research_id=self.context.research.id,
            decision=DecisionType(self.decision),
            justification=self.justification or None,
            comments_to_author=self.comments_to_author or None,
        )


# Advisory input schemas

_PHONE_PATTERN = re.compile(r"^[0-9+\-\s]+$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def _check_email(value: str) -> str:
    if not _EMAIL_PATTERN.match(value or ""):
        raise ValueError("البريد الإلكتروني غير صالح | Invalid email address")
    return value


EmailText = Annotated[str, AfterValidator(_check_email)]

class LoginForm(BaseModel):
    email: EmailText
    password: str = Field(min_length=1)


class RegisterForm(BaseModel):
    email: EmailText
    password: str = Field(min_length=8)
    confirm_password: str
    full_name_en: str = Field(min_length=3)
    full_name_ar: str = Field(min_length=3)
    phone_number: str = Field(min_length=10)
    institution: Optional[str] = None

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        checks = [r"[A-Z]", r"[a-z]", r"[0-9]", r"[^A-Za-z0-9]"]
        if not all(re.search(pattern, value) for pattern in checks):
            raise ValueError(
                "يجب أن تحتوي كلمة المرور على حرف كبير وصغير ورقم ورمز | "
                "Password must contain upper and lower case letters, a digit and a special character"
            )
        return value

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, value: str) -> str:
        if not _PHONE_PATTERN.match(value):
            raise ValueError("رقم الهاتف غير صالح | Invalid phone number")
        return value

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise ValueError("كلمات المرور غير متطابقة | Passwords do not match")
        return self


class ForgotPasswordForm(BaseModel):
    email: EmailText


class ResetPasswordForm(BaseModel):
    email: EmailText
    code: str = Field(min_length=6, max_length=6)
    new_password: str = Field(min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "ResetPasswordForm":
        if self.new_password != self.confirm_password:
            raise ValueError("كلمات المرور غير متطابقة | Passwords do not match")
        return self


class ContactForm(BaseModel):
    name: str = Field(min_length=2)
    email: EmailText
    subject: str = Field(min_length=5)
    message: str = Field(min_length=20)


class AuthorForm(BaseModel):
    full_name_en: str = Field(min_length=1)
    full_name_ar: str = ""
    email: EmailText
    institution: Optional[str] = None
    is_corresponding: bool = False


class ResearchForm(BaseModel):
    conference_id: str = Field(min_length=1)
    title_en: str = Field(min_length=10)
    title_ar: str = Field(min_length=10)
    abstract_en: Optional[str] = None
    abstract_ar: Optional[str] = None
    keywords: Optional[str] = None
    topic_area: Optional[str] = None
    authors: List[AuthorForm] = Field(min_length=1)


class ConferenceForm(BaseModel):
    name_en: str = Field(min_length=3)
    name_ar: str = Field(min_length=3)
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    start_date: str = Field(min_length=1)
    end_date: str = Field(min_length=1)
    location: Optional[str] = None
    website: Optional[str] = None

    @field_validator("website")
    @classmethod
    def _website(cls, value: Optional[str]) -> Optional[str]:
        if value and not _URL_PATTERN.match(value):
            raise ValueError("رابط غير صالح | Invalid URL")
        return value


class CreateUserForm(BaseModel):
    email: EmailText
    password: str = Field(min_length=6)
    full_name_en: str = Field(min_length=3)
    full_name_ar: str = Field(min_length=3)
    phone_number: str = Field(min_length=10)
    institution: Optional[str] = None
    role: str

    @field_validator("role")
    @classmethod
    def _staff_role(cls, value: str) -> str:
        if value not in (ROLE_REVIEWER, ROLE_CHAIRMAN):
            raise ValueError(f"Role must be {ROLE_REVIEWER} or {ROLE_CHAIRMAN}")
        return value


def _error_field(error: Dict[str, Any]) -> str:
    location = [str(part) for part in error.get("loc", ())]
    return ".".join(location) or "__all__"


def validate_form(schema: Type[S], data: Dict[str, Any]) -> S:
    """Validate form input against a schema, raising ValidationFailed with per-field messages."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors: Dict[str, List[str]] = {}
        for error in e.errors():
            message = error.get("msg", "Invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.setdefault(_error_field(error), []).append(message)
        logger.debug("Form validation failed", form=schema.__name__, fields=list(errors))
        raise ValidationFailed(errors) from e
