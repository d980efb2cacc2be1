"""Endpoint groups for the RSCMP REST API and the client facade."""

import mimetypes
import os
from contextlib import ExitStack
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from tqdm import tqdm

from rscmp_client.client.transport import ApiClient
from rscmp_client.config.constants import DEFAULT_FILE_TYPE, DEFAULT_PAGE_SIZE
from rscmp_client.config.settings import ClientSettings
from rscmp_client.core.models import (
    AdminDashboard,
    AuditLog,
    AuthResponse,
    ChairmanDashboard,
    Conference,
    ContactCreateRequest,
    ContactMessage,
    CreateUserByAdminRequest,
    Decision,
    DecisionContext,
    DecisionCreateRequest,
    FileUploadResponse,
    LoginRequest,
    Notification,
    PagedResult,
    RegisterRequest,
    Research,
    ResearchCreateRequest,
    Review,
    ReviewCriteria,
    ReviewerDashboard,
    ReviewSubmitRequest,
    SystemSetting,
    User,
)
from rscmp_client.core.stores import AuthStore, NotificationStore, UIStore
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], data: Any) -> M:
    return model.model_validate(data)


def _parse_list(model: Type[M], data: Any) -> List[M]:
    return [model.model_validate(item) for item in (data or [])]


def _file_part(stack: ExitStack, path: str) -> tuple:
    content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    handle = stack.enter_context(open(path, "rb"))
    return (os.path.basename(path), handle, content_type)


class _Group:
    def __init__(self, api: ApiClient):
        self.api = api


class AuthApi(_Group):
    def login(self, email: str, password: str) -> AuthResponse:
        body = LoginRequest(email=email, password=password).to_payload()
        return _parse(AuthResponse, self.api.post("/auth/login", json=body))

    def register(self, request: RegisterRequest) -> AuthResponse:
        return _parse(AuthResponse, self.api.post("/auth/register", json=request.to_payload()))

    def refresh(self, access_token: str, refresh_token: str) -> AuthResponse:
        body = {"accessToken": access_token, "refreshToken": refresh_token}
        return _parse(AuthResponse, self.api.post("/auth/refresh", json=body))

    def logout(self) -> None:
        self.api.post("/auth/logout")

    def me(self) -> User:
        return _parse(User, self.api.get("/auth/me"))

    def roles(self) -> List[str]:
        return list(self.api.get("/auth/roles") or [])

    def select_role(self, role: str) -> None:
        self.api.post("/auth/select-role", json={"role": role})

    def update_profile(self, **fields: Any) -> User:
        body = {to_camel(key): value for key, value in fields.items()}
        return _parse(User, self.api.put("/auth/profile", json=body))

    def change_password(self, current_password: str, new_password: str) -> None:
        self.api.post(
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    def forgot_password(self, email: str) -> None:
        self.api.post("/auth/forgot-password", json={"email": email})

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        self.api.post(
            "/auth/reset-password",
            json={"email": email, "code": code, "newPassword": new_password},
        )


class ConferencesApi(_Group):
    def list(self, active_only: bool = False) -> List[Conference]:
        return _parse_list(Conference, self.api.get("/conferences", params={"activeOnly": active_only}))

    def get(self, conference_id: str) -> Conference:
        return _parse(Conference, self.api.get(f"/conferences/{conference_id}"))

    def create(
        self,
        fields: Dict[str, Any],
        logo_image: Optional[str] = None,
        banner_image: Optional[str] = None,
    ) -> Conference:
        """Create a conference; images switch the body to multipart form data."""
        if logo_image is None and banner_image is None:
            return _parse(Conference, self.api.post("/conferences", json=fields))

        form = {
            key: (str(value).lower() if isinstance(value, bool) else str(value))
            for key, value in fields.items()
            if value is not None
        }
        with ExitStack() as stack:
            files = {}
            if logo_image:
                files["logoImage"] = _file_part(stack, logo_image)
            if banner_image:
                files["bannerImage"] = _file_part(stack, banner_image)
            data = self.api.post("/conferences", data=form, files=files)
        return _parse(Conference, data)

    def update(self, conference_id: str, fields: Dict[str, Any]) -> Conference:
        return _parse(Conference, self.api.put(f"/conferences/{conference_id}", json=fields))

    def delete(self, conference_id: str) -> None:
        self.api.delete(f"/conferences/{conference_id}")

    def statistics(self, conference_id: str) -> Dict[str, Any]:
        return self.api.get(f"/conferences/{conference_id}/statistics") or {}

    def criteria(self, conference_id: str) -> List[ReviewCriteria]:
        return _parse_list(ReviewCriteria, self.api.get(f"/conferences/{conference_id}/criteria"))

    def add_criteria(self, conference_id: str, criteria: ReviewCriteria) -> ReviewCriteria:
        body = criteria.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)
        return _parse(ReviewCriteria, self.api.post(f"/conferences/{conference_id}/criteria", json=body))


class ResearchApi(_Group):
    def list(
        self,
        conference_id: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
    ) -> PagedResult[Research]:
        params = {
            "conferenceId": conference_id,
            "status": status,
            "pageNumber": page,
            "pageSize": page_size,
            "search": search,
        }
        return _parse(PagedResult[Research], self.api.get("/research", params=params))

    def my_submissions(self) -> List[Research]:
        return _parse_list(Research, self.api.get("/research/my-submissions"))

    def get(self, research_id: str) -> Research:
        return _parse(Research, self.api.get(f"/research/{research_id}"))

    def create(self, request: ResearchCreateRequest) -> Research:
        return _parse(Research, self.api.post("/research", json=request.to_payload()))

    def update(self, research_id: str, request: ResearchCreateRequest) -> Research:
        return _parse(Research, self.api.put(f"/research/{research_id}", json=request.to_payload()))

    def delete(self, research_id: str) -> None:
        self.api.delete(f"/research/{research_id}")

    def submit(self, research_id: str) -> Research:
        return _parse(Research, self.api.post(f"/research/{research_id}/submit"))

    def upload_file(
        self, research_id: str, file_path: str, file_type: str = DEFAULT_FILE_TYPE
    ) -> FileUploadResponse:
        with ExitStack() as stack:
            files = {"file": _file_part(stack, file_path)}
            data = self.api.post(
                f"/research/{research_id}/files",
                params={"fileType": file_type},
                files=files,
            )
        return _parse(FileUploadResponse, data)

    def download_file(self, research_id: str, file_id: str) -> bytes:
        return self.api.get(f"/research/{research_id}/files/{file_id}", raw=True)

    def public(self, conference_id: Optional[str] = None) -> List[Research]:
        return _parse_list(Research, self.api.get("/research/public", params={"conferenceId": conference_id}))

    def public_detail(self, research_id: str) -> Research:
        return _parse(Research, self.api.get(f"/research/public/{research_id}"))


class ReviewsApi(_Group):
    def pending(self) -> List[Review]:
        return _parse_list(Review, self.api.get("/reviews/pending"))

    def completed(self) -> List[Review]:
        return _parse_list(Review, self.api.get("/reviews/completed"))

    def get(self, review_id: str) -> Review:
        return _parse(Review, self.api.get(f"/reviews/{review_id}"))

    def by_research(self, research_id: str) -> List[Review]:
        return _parse_list(Review, self.api.get(f"/reviews/research/{research_id}"))

    def assign(self, research_id: str, reviewer_id: str, due_date: Optional[str] = None) -> Review:
        body = {"researchId": research_id, "reviewerId": reviewer_id, "dueDate": due_date}
        return _parse(Review, self.api.post("/reviews/assign", json=body))

    def start(self, review_id: str) -> Review:
        return _parse(Review, self.api.post(f"/reviews/{review_id}/start"))

    def submit(self, review_id: str, request: ReviewSubmitRequest) -> Review:
        return _parse(Review, self.api.post(f"/reviews/{review_id}/submit", json=request.to_payload()))

    def decline(self, review_id: str, reason: Optional[str] = None) -> None:
        # The server binds the raw JSON string body as the reason
        self.api.post(f"/reviews/{review_id}/decline", json=reason)


class DecisionsApi(_Group):
    def pending(self) -> List[Research]:
        return _parse_list(Research, self.api.get("/decisions/pending"))

    def research_for_decision(self, research_id: str) -> DecisionContext:
        return _parse(DecisionContext, self.api.get(f"/decisions/research/{research_id}"))

    def create(self, request: DecisionCreateRequest) -> Decision:
        return _parse(Decision, self.api.post("/decisions", json=request.to_payload()))

    def get(self, decision_id: str) -> Decision:
        return _parse(Decision, self.api.get(f"/decisions/{decision_id}"))

    def my_decisions(self) -> List[Decision]:
        return _parse_list(Decision, self.api.get("/decisions/my-decisions"))


class NotificationsApi(_Group):
    def list(self, unread_only: bool = False) -> List[Notification]:
        return _parse_list(Notification, self.api.get("/notifications", params={"unreadOnly": unread_only}))

    def unread_count(self) -> int:
        return int(self.api.get("/notifications/unread-count") or 0)

    def mark_read(self, notification_id: str) -> None:
        self.api.post(f"/notifications/{notification_id}/read")

    def mark_all_read(self) -> None:
        self.api.post("/notifications/read-all")


class ContactApi(_Group):
    def submit(self, request: ContactCreateRequest) -> None:
        self.api.post("/contact", json=request.to_payload())


class DashboardApi(_Group):
    def reviewer(self) -> ReviewerDashboard:
        return _parse(ReviewerDashboard, self.api.get("/dashboard/reviewer"))

    def chairman(self) -> ChairmanDashboard:
        return _parse(ChairmanDashboard, self.api.get("/dashboard/chairman"))

    def admin(self) -> AdminDashboard:
        return _parse(AdminDashboard, self.api.get("/admin/dashboard"))


class AdminApi(_Group):
    def users(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> PagedResult[User]:
        params = {"pageNumber": page, "pageSize": page_size, "role": role, "search": search}
        return _parse(PagedResult[User], self.api.get("/admin/users", params=params))

    def user(self, user_id: str) -> User:
        return _parse(User, self.api.get(f"/admin/users/{user_id}"))

    def create_user(self, request: CreateUserByAdminRequest) -> User:
        return _parse(User, self.api.post("/admin/users", json=request.to_payload()))

    def assign_role(self, user_id: str, role: str) -> None:
        self.api.post(f"/admin/users/{user_id}/roles", json=role)

    def remove_role(self, user_id: str, role: str) -> None:
        self.api.delete(f"/admin/users/{user_id}/roles/{role}")

    def delete_user(self, user_id: str) -> None:
        self.api.delete(f"/admin/users/{user_id}")

    def settings(self, category: Optional[str] = None) -> List[SystemSetting]:
        return _parse_list(SystemSetting, self.api.get("/admin/settings", params={"category": category}))

    def update_setting(self, key: str, value: str) -> SystemSetting:
        return _parse(SystemSetting, self.api.put(f"/admin/settings/{key}", json=value))

    def audit_logs(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
    ) -> PagedResult[AuditLog]:
        params = {
            "pageNumber": page,
            "pageSize": page_size,
            "action": action,
            "entityType": entity_type,
        }
        return _parse(PagedResult[AuditLog], self.api.get("/admin/audit-logs", params=params))

    def contact_messages(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        status: Optional[str] = None,
    ) -> PagedResult[ContactMessage]:
        params = {"pageNumber": page, "pageSize": page_size, "status": status}
        return _parse(PagedResult[ContactMessage], self.api.get("/admin/contact-messages", params=params))

    def reply_to_message(self, message_id: str, response: str) -> ContactMessage:
        return _parse(ContactMessage, self.api.post(f"/admin/contact-messages/{message_id}/reply", json=response))


def iter_pages(
    fetch: Callable[..., PagedResult], page_size: int = DEFAULT_PAGE_SIZE, desc: str = "Loading pages..."
) -> Iterator[Any]:
    """Yield every item of a paginated listing, one page request at a time."""
    first = fetch(page=1, page_size=page_size)
    yield from first.items

    for page in tqdm(range(2, first.total_pages + 1), desc=desc, disable=first.total_pages < 2):
        result = fetch(page=page, page_size=page_size)
        yield from result.items


class RSCMPClient:
    """Facade bundling the transport, the client-side stores and every endpoint group."""

    def __init__(
        self,
        settings: ClientSettings,
        auth_store: Optional[AuthStore] = None,
        ui_store: Optional[UIStore] = None,
        notification_store: Optional[NotificationStore] = None,
        session=None,
    ):
        self.settings = settings
        self.auth_store = auth_store or AuthStore()
        self.ui_store = ui_store or UIStore()
        self.notification_store = notification_store or NotificationStore()
        self.api = ApiClient(settings, self.auth_store, session=session)

        self.auth = AuthApi(self.api)
        self.conferences = ConferencesApi(self.api)
        self.research = ResearchApi(self.api)
        self.reviews = ReviewsApi(self.api)
        self.decisions = DecisionsApi(self.api)
        self.notifications = NotificationsApi(self.api)
        self.contact = ContactApi(self.api)
        self.dashboard = DashboardApi(self.api)
        self.admin = AdminApi(self.api)

        logger.info("Initialized RSCMP client", base_url=settings.base_url)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self.api.close()

    def refresh_session(self) -> AuthResponse:
        """Exchange the stored token pair for a fresh one."""
        store = self.auth_store
        if not store.access_token or not store.refresh_token:
            raise ValueError("No token pair to refresh")
        response = self.auth.refresh(store.access_token, store.refresh_token)
        store.set_tokens(response.access_token, response.refresh_token)
        store.set_user(response.user)
        logger.info("Session refreshed", user_id=response.user.id)
        return response
