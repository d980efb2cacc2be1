"""Unit tests for models.py."""

import pytest
from pydantic import ValidationError

from rscmp_client.core.models import (
    AuthResponse,
    Conference,
    DecisionContext,
    Notification,
    PagedResult,
    Research,
    ResearchCreateRequest,
    Review,
    User,
)

from conftest import research_payload


class TestUser:
    """Test the User model."""

    def test_parses_camel_case(self):
        """Test server payloads in camelCase are accepted."""
        user = User.model_validate(
            {"id": "u1", "email": "a@b.co", "fullNameEn": "Ann", "fullNameAr": "آن", "roles": ["Reviewer"]}
        )
        assert user.full_name_en == "Ann"
        assert user.has_role("Reviewer")
        assert not user.has_role("Admin")

    def test_display_name(self):
        """Test the localized display name falls back sensibly."""
        user = User(id="u1", email="a@b.co", full_name_en="Ann", full_name_ar="آن")
        assert user.display_name("en") == "Ann"
        assert user.display_name("ar") == "آن"
        assert User(id="u2", email="x@y.z").display_name() == "x@y.z"

    def test_missing_required_field(self):
        """Test a payload without an id is rejected."""
        with pytest.raises(ValidationError):
            User.model_validate({"email": "a@b.co"})

    def test_auth_response(self):
        """Test the token pair and nested user parse."""
        response = AuthResponse.model_validate(
            {"accessToken": "a", "refreshToken": "r", "user": {"id": "u1", "email": "a@b.co"}}
        )
        assert response.access_token == "a"
        assert response.user.roles == []


class TestResearch:
    """Test the Research model."""

    def test_unknown_status_survives(self):
        """Test statuses the client does not know are kept verbatim."""
        research = Research.model_validate(research_payload(status="Archived"))
        assert research.status == "Archived"
        assert not research.is_draft

    def test_title_by_language(self):
        """Test titles follow the active language."""
        research = Research.model_validate(research_payload())
        assert research.title("en").startswith("A study")
        assert research.title("ar").startswith("دراسة")

    def test_review_criteria_from_conference(self):
        """Test criteria are read from the embedded conference."""
        research = Research.model_validate(
            research_payload(conference={"id": "c1", "reviewCriteria": [{"id": "k1", "maxScore": 5}]})
        )
        assert research.review_criteria[0].max_score == 5
        assert Research.model_validate(research_payload()).review_criteria == []

    def test_create_request_payload(self):
        """Test request payloads use camelCase and omit unset fields."""
        request = ResearchCreateRequest(conference_id="c1", title_en="Title", title_ar="عنوان")
        assert request.to_payload() == {
            "conferenceId": "c1",
            "titleEn": "Title",
            "titleAr": "عنوان",
            "authors": [],
        }


class TestOtherModels:
    """Test remaining DTOs."""

    def test_review_editable_statuses(self):
        """Test only in-progress and returned reviews are editable."""
        assert Review(id="1", research_id="r", status="InProgress").is_editable
        assert Review(id="1", research_id="r", status="Returned").is_editable
        assert not Review(id="1", research_id="r", status="Completed").is_editable
        assert not Review(id="1", research_id="r", status="Pending").is_editable

    def test_notification_localized(self):
        """Test notification text follows the language."""
        notification = Notification(id="n", title_en="Hello", title_ar="مرحبا", message_en="m")
        assert notification.title("ar") == "مرحبا"
        assert notification.message("ar") == "m"

    def test_conference_criteria_defaults(self):
        """Test criteria scoring defaults."""
        conference = Conference.model_validate({"id": "c1", "reviewCriteria": [{"id": "k1"}]})
        criterion = conference.review_criteria[0]
        assert (criterion.min_score, criterion.max_score, criterion.weight, criterion.order) == (0, 10, 1.0, 1)

    def test_paged_result(self):
        """Test the pagination envelope."""
        page = PagedResult[User].model_validate(
            {"items": [{"id": "u1", "email": "a@b.co"}], "totalCount": 1, "pageNumber": 1, "pageSize": 10, "totalPages": 1}
        )
        assert page.items[0].id == "u1"
        assert not page.has_next

    def test_decision_context_camel_case(self):
        """Test camelCase decision contexts parse as well as PascalCase."""
        context = DecisionContext.model_validate(
            {
                "research": {"id": "r1"},
                "reviews": [{"id": "rv1", "isChairApproved": True}],
                "existingDecision": {"id": "d1", "researchId": "r1", "decision": "Approved"},
            }
        )
        assert context.reviews[0].is_chair_approved
        assert context.is_decided
        assert context.existing_decision.decision == "Approved"
