"""Unit tests for services.py."""

from unittest.mock import MagicMock, patch

import pytest

from rscmp_client.client.services import iter_pages
from rscmp_client.core.models import (
    DecisionContext,
    FileUploadResponse,
    PagedResult,
    Research,
    ReviewScore,
    ReviewSubmitRequest,
)

from conftest import make_response, make_user, research_payload, user_payload


def called(session):
    """Return (method, url, kwargs) of the last request."""
    args, kwargs = session.request.call_args
    return args[0], args[1], kwargs


class TestAuthApi:
    """Test authentication endpoints."""

    def test_login(self, client, session):
        """Test login posts credentials and parses the token pair."""
        session.request.return_value = make_response(
            200,
            {"accessToken": "a", "refreshToken": "r", "user": user_payload(["Reviewer"])},
        )
        response = client.auth.login("user@example.com", "pw")
        method, url, kwargs = called(session)
        assert (method, url) == ("POST", "http://rscmp.test/api/auth/login")
        assert kwargs["json"] == {"email": "user@example.com", "password": "pw"}
        assert response.user.roles == ["Reviewer"]

    def test_update_profile_uses_camel_case(self, client, session):
        """Test profile fields are sent in camelCase."""
        session.request.return_value = make_response(200, user_payload())
        client.auth.update_profile(full_name_en="New Name", preferred_language="ar")
        _, _, kwargs = called(session)
        assert kwargs["json"] == {"fullNameEn": "New Name", "preferredLanguage": "ar"}

    def test_refresh_session(self, client, session):
        """Test refresh stores the new token pair and user."""
        client.auth_store.login(make_user(), "old", "old-r")
        session.request.return_value = make_response(
            200, {"accessToken": "new", "refreshToken": "new-r", "user": user_payload()}
        )
        client.refresh_session()
        assert client.auth_store.access_token == "new"
        assert client.auth_store.refresh_token == "new-r"
        _, _, kwargs = called(session)
        assert kwargs["json"] == {"accessToken": "old", "refreshToken": "old-r"}

    def test_refresh_session_requires_tokens(self, client):
        """Test refresh without a token pair is refused."""
        with pytest.raises(ValueError):
            client.refresh_session()


class TestResearchApi:
    """Test research endpoints."""

    def test_list_uses_paging_params(self, client, session):
        """Test the listing sends pageNumber/pageSize and parses the envelope."""
        session.request.return_value = make_response(
            200,
            {
                "items": [research_payload("r1"), research_payload("r2", "Submitted")],
                "totalCount": 12,
                "pageNumber": 1,
                "pageSize": 10,
                "totalPages": 2,
            },
        )
        page = client.research.list(status="Submitted", search="graph")
        _, url, kwargs = called(session)
        assert url.endswith("/research")
        assert kwargs["params"] == {
            "status": "Submitted",
            "pageNumber": 1,
            "pageSize": 10,
            "search": "graph",
        }
        assert [r.id for r in page.items] == ["r1", "r2"]
        assert page.has_next

    def test_submit(self, client, session):
        """Test submitting posts to the submit endpoint."""
        session.request.return_value = make_response(200, research_payload(status="Submitted"))
        research = client.research.submit("r1")
        method, url, _ = called(session)
        assert (method, url) == ("POST", "http://rscmp.test/api/research/r1/submit")
        assert research.status == "Submitted"

    def test_upload_file(self, client, session, tmp_path):
        """Test attachments are sent as multipart with the file type."""
        pdf = tmp_path / "paper.pdf"
        pdf.write_bytes(b"%PDF-1.7")
        session.request.return_value = make_response(
            200, {"fileId": "f1", "fileName": "paper.pdf", "fileSize": 8, "fileType": "MainDocument"}
        )
        uploaded = client.research.upload_file("r1", str(pdf))
        _, url, kwargs = called(session)
        assert url.endswith("/research/r1/files")
        assert kwargs["params"] == {"fileType": "MainDocument"}
        name, _, content_type = kwargs["files"]["file"]
        assert (name, content_type) == ("paper.pdf", "application/pdf")
        assert isinstance(uploaded, FileUploadResponse)
        assert uploaded.file_id == "f1"

    def test_download_file(self, client, session):
        """Test downloads return raw bytes."""
        session.request.return_value = make_response(200, content=b"%PDF")
        assert client.research.download_file("r1", "f1") == b"%PDF"


class TestOtherApis:
    """Test review, decision, notification and admin endpoints."""

    def test_decline_sends_raw_string(self, client, session):
        """Test the decline reason is the JSON body itself."""
        session.request.return_value = make_response(204)
        client.reviews.decline("rv1", "Conflict of interest")
        _, url, kwargs = called(session)
        assert url.endswith("/reviews/rv1/decline")
        assert kwargs["json"] == "Conflict of interest"

    def test_submit_review(self, client, session):
        """Test review scores are posted in camelCase."""
        session.request.return_value = make_response(200, {"id": "rv1", "researchId": "r1", "status": "Completed"})
        request = ReviewSubmitRequest(
            scores=[ReviewScore(criteria_id="c1", score=7)], recommendation="Approved"
        )
        review = client.reviews.submit("rv1", request)
        _, _, kwargs = called(session)
        assert kwargs["json"]["scores"] == [{"criteriaId": "c1", "score": 7.0}]
        assert kwargs["json"]["recommendation"] == "Approved"
        assert review.status == "Completed"

    def test_research_for_decision(self, client, session):
        """Test the decision context is parsed from PascalCase."""
        session.request.return_value = make_response(
            200,
            {
                "Research": {"Id": "r1", "TitleEn": "T"},
                "Reviews": [],
                "Summary": {"AverageScore": None},
                "ExistingDecision": None,
            },
        )
        context = client.decisions.research_for_decision("r1")
        assert isinstance(context, DecisionContext)
        assert context.research.id == "r1"

    def test_unread_count(self, client, session):
        """Test the unread count is an integer."""
        session.request.return_value = make_response(200, 4)
        assert client.notifications.unread_count() == 4

    def test_notifications_filter(self, client, session):
        """Test the unreadOnly flag is sent as a lowercase boolean."""
        session.request.return_value = make_response(200, [])
        client.notifications.list(unread_only=True)
        _, _, kwargs = called(session)
        assert kwargs["params"] == {"unreadOnly": "true"}

    def test_admin_dashboard_path(self, client, session):
        """Test the admin dashboard lives under /admin."""
        session.request.return_value = make_response(200, {"totalUsers": 3})
        assert client.dashboard.admin().total_users == 3
        _, url, _ = called(session)
        assert url.endswith("/admin/dashboard")

    def test_conference_create_with_images(self, client, session, tmp_path):
        """Test images switch conference creation to multipart form data."""
        logo = tmp_path / "logo.png"
        logo.write_bytes(b"\x89PNG")
        session.request.return_value = make_response(200, {"id": "c1", "nameEn": "Conf"})
        conference = client.conferences.create(
            {"nameEn": "Conf", "isActive": True, "description": None}, logo_image=str(logo)
        )
        _, _, kwargs = called(session)
        assert kwargs["data"] == {"nameEn": "Conf", "isActive": "true"}
        assert set(kwargs["files"]) == {"logoImage"}
        assert conference.id == "c1"


class TestIterPages:
    """Test pagination walking."""

    def test_walks_all_pages(self):
        """Test every page is fetched once and items are chained."""
        pages = {
            1: PagedResult[Research](items=[Research(id="a")], total_pages=3, page_number=1),
            2: PagedResult[Research](items=[Research(id="b")], total_pages=3, page_number=2),
            3: PagedResult[Research](items=[Research(id="c")], total_pages=3, page_number=3),
        }
        fetch = MagicMock(side_effect=lambda page, page_size: pages[page])
        with patch("rscmp_client.client.services.tqdm", side_effect=lambda it, **kwargs: it):
            ids = [r.id for r in iter_pages(fetch, page_size=1)]
        assert ids == ["a", "b", "c"]
        assert fetch.call_count == 3

    def test_single_page(self):
        """Test a single page makes one request."""
        fetch = MagicMock(return_value=PagedResult[Research](items=[], total_pages=0))
        assert list(iter_pages(fetch)) == []
        fetch.assert_called_once_with(page=1, page_size=10)
