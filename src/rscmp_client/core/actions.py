"""Page-level workflows over the RSCMP API.

Each action is one mutation followed, where the page would do so, by a re-fetch.
API failures are reported as a single toast and leave client state as it was
before the call. Form validation failures raise ``ValidationFailed`` so the
caller can show them next to the fields.
"""

from typing import Any, Dict, List, Optional, Tuple

from rscmp_client.client.errors import (
    AuthenticationError,
    BadRequestError,
    RSCMPError,
    Toaster,
    report_error,
    safe_api_call,
)
from rscmp_client.client.services import RSCMPClient
from rscmp_client.config.constants import (
    DEFAULT_FILE_TYPE,
    LOGIN_ROUTE,
    MSG_ALL_MARKED_READ,
    MSG_DOWNLOAD_FAILED,
    MSG_INVALID_CREDENTIALS,
    MSG_REVIEW_DECLINED,
    MSG_REVIEW_STARTED,
    MSG_SUCCESS,
)
from rscmp_client.core.forms import (
    ContactForm,
    DecisionForm,
    ResearchForm,
    ReviewForm,
    validate_form,
)
from rscmp_client.core.models import (
    ContactCreateRequest,
    ContactMessage,
    Decision,
    FileUploadResponse,
    Notification,
    PagedResult,
    Research,
    ResearchCreateRequest,
    Review,
    User,
)
from rscmp_client.core.routing import LoginRoute, dashboard_for, resolve_login_route
from rscmp_client.core.status import ACTION_DELETE, ACTION_SUBMIT, ACTION_UPLOAD, submission_actions
from rscmp_client.core.stores import SessionHints
from rscmp_client.utils.logging_config import get_logger
from rscmp_client.utils.utils import save_blob

logger = get_logger(__name__)

INTENDED_ROLE_HINT = "intendedRole"


def _fail(error: RSCMPError, toaster: Optional[Toaster], custom_message: Optional[str] = None) -> None:
    report_error(error, toaster, custom_message)


def _succeed(toaster: Optional[Toaster], message: str = MSG_SUCCESS) -> None:
    if toaster is not None:
        toaster.success(message)


# Session


def login(
    client: RSCMPClient,
    email: str,
    password: str,
    hints: Optional[SessionHints] = None,
    toaster: Optional[Toaster] = None,
) -> Optional[LoginRoute]:
    """Authenticate and decide where to land.

    The ``intendedRole`` hint is consumed whether or not it is honoured.
    """
    try:
        response = client.auth.login(email, password)
    except (AuthenticationError, BadRequestError) as e:
        logger.info("Login rejected", email=email, status=e.status_code)
        if toaster is not None:
            toaster.error(e.message or MSG_INVALID_CREDENTIALS)
        return None
    except RSCMPError as e:
        _fail(e, toaster)
        return None

    store = client.auth_store
    store.login(response.user, response.access_token, response.refresh_token)

    intended = hints.pop(INTENDED_ROLE_HINT) if hints is not None else None
    route = resolve_login_route(response.user, intended)
    if route.role is not None:
        store.set_selected_role(route.role)

    refresh_unread_count(client)
    logger.info("Logged in", user_id=response.user.id, path=route.path, role=route.role)
    return route


def select_role(client: RSCMPClient, role: str, toaster: Optional[Toaster] = None) -> Optional[str]:
    """Activate one of the user's roles; purely client-side."""
    try:
        client.auth_store.set_selected_role(role)
    except ValueError as e:
        logger.warning("Role selection refused", role=role)
        if toaster is not None:
            toaster.error(str(e))
        return None
    return dashboard_for(role)


def logout(client: RSCMPClient) -> str:
    """Tell the server (best effort) and clear the local session."""
    if client.auth_store.is_authenticated:
        safe_api_call(client.auth.logout, default=None)
    client.auth_store.logout()
    client.notification_store.clear_unread_count()
    return LOGIN_ROUTE


def bootstrap_session(client: RSCMPClient, toaster: Optional[Toaster] = None) -> Optional[User]:
    """Resume a persisted session by fetching the current user and unread count."""
    store = client.auth_store
    if not store.access_token:
        return None
    try:
        user = client.auth.me()
    except AuthenticationError:
        # The transport has already cleared the stale session
        return None
    except RSCMPError as e:
        _fail(e, toaster)
        return None

    store.set_user(user)
    refresh_unread_count(client)
    return user


# Submissions


def load_my_submissions(client: RSCMPClient, toaster: Optional[Toaster] = None) -> List[Research]:
    """The researcher's own submissions; 404 reads as none."""
    return safe_api_call(client.research.my_submissions, default=[], show_error=True, toaster=toaster)


def load_submissions_page(
    client: RSCMPClient,
    page: int = 1,
    search: Optional[str] = None,
    status: Optional[str] = None,
    toaster: Optional[Toaster] = None,
) -> PagedResult[Research]:
    """One page of the admin submissions table, empty on failure."""
    page_size = client.settings.page_size
    return safe_api_call(
        lambda: client.research.list(status=status, page=page, page_size=page_size, search=search),
        default=PagedResult[Research](page_number=page, page_size=page_size),
        show_error=True,
        toaster=toaster,
    )


def create_submission(
    client: RSCMPClient, data: Dict[str, Any], toaster: Optional[Toaster] = None
) -> Optional[Research]:
    """Validate the new-submission form and create a Draft."""
    form = validate_form(ResearchForm, data)
    request = ResearchCreateRequest.model_validate(form.model_dump())
    try:
        research = client.research.create(request)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    _succeed(toaster)
    logger.info("Draft created", research_id=research.id)
    return research


def _require_action(research: Research, action: str, toaster: Optional[Toaster]) -> bool:
    if action in submission_actions(research):
        return True
    logger.warning("Action not available", research_id=research.id, action=action, status=research.status)
    if toaster is not None:
        toaster.error(f"Cannot {action} a submission in status {research.status}")
    return False


def submit_submission(
    client: RSCMPClient, research: Research, toaster: Optional[Toaster] = None
) -> Research:
    """Submit a Draft for review and return the re-fetched submission.

    On failure the submission passed in is returned unchanged.
    """
    if not _require_action(research, ACTION_SUBMIT, toaster):
        return research
    try:
        client.research.submit(research.id)
        refreshed = client.research.get(research.id)
    except RSCMPError as e:
        _fail(e, toaster)
        return research
    _succeed(toaster)
    logger.info("Submission sent", research_id=research.id, status=refreshed.status)
    return refreshed


def delete_submission(
    client: RSCMPClient, research: Research, toaster: Optional[Toaster] = None
) -> bool:
    if not _require_action(research, ACTION_DELETE, toaster):
        return False
    try:
        client.research.delete(research.id)
    except RSCMPError as e:
        _fail(e, toaster)
        return False
    _succeed(toaster)
    return True


def upload_attachment(
    client: RSCMPClient,
    research: Research,
    file_path: str,
    file_type: str = DEFAULT_FILE_TYPE,
    toaster: Optional[Toaster] = None,
) -> Optional[FileUploadResponse]:
    if not _require_action(research, ACTION_UPLOAD, toaster):
        return None
    try:
        uploaded = client.research.upload_file(research.id, file_path, file_type)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    _succeed(toaster)
    return uploaded


def download_attachment(
    client: RSCMPClient,
    research_id: str,
    file_id: str,
    file_name: str,
    directory: str = ".",
    toaster: Optional[Toaster] = None,
) -> Optional[str]:
    """Fetch an attachment and save it locally under its original name."""
    try:
        content = client.research.download_file(research_id, file_id)
    except RSCMPError as e:
        _fail(e, toaster, MSG_DOWNLOAD_FAILED)
        return None
    return save_blob(content, file_name, directory)


# Reviews


def load_pending_reviews(client: RSCMPClient, toaster: Optional[Toaster] = None) -> List[Review]:
    return safe_api_call(client.reviews.pending, default=[], show_error=True, toaster=toaster)


def load_review_form(
    client: RSCMPClient, review_id: str, toaster: Optional[Toaster] = None
) -> Optional[Tuple[Review, Research, ReviewForm]]:
    """Fetch a review with its research and build the scoring form from the conference criteria."""
    try:
        review = client.reviews.get(review_id)
        research = client.research.get(review.research_id)
        criteria = research.review_criteria
        if not criteria and research.conference_id:
            criteria = client.conferences.criteria(research.conference_id)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    return review, research, ReviewForm(criteria, existing=review)


def start_review(
    client: RSCMPClient, review_id: str, toaster: Optional[Toaster] = None
) -> Optional[Review]:
    try:
        review = client.reviews.start(review_id)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    _succeed(toaster, MSG_REVIEW_STARTED)
    return review


def submit_review(
    client: RSCMPClient, review_id: str, form: ReviewForm, toaster: Optional[Toaster] = None
) -> Optional[Review]:
    """Send the per-criterion scores; the overall score is computed by the server."""
    request = form.to_request()
    try:
        review = client.reviews.submit(review_id, request)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    _succeed(toaster)
    logger.info("Review submitted", review_id=review_id, recommendation=form.recommendation)
    return review


def decline_review(
    client: RSCMPClient, review_id: str, reason: Optional[str] = None, toaster: Optional[Toaster] = None
) -> bool:
    try:
        client.reviews.decline(review_id, reason)
    except RSCMPError as e:
        _fail(e, toaster)
        return False
    _succeed(toaster, MSG_REVIEW_DECLINED)
    return True


# Decisions


def load_pending_decisions(client: RSCMPClient, toaster: Optional[Toaster] = None) -> List[Research]:
    return safe_api_call(client.decisions.pending, default=[], show_error=True, toaster=toaster)


def load_decision_form(
    client: RSCMPClient, research_id: str, toaster: Optional[Toaster] = None
) -> Optional[DecisionForm]:
    try:
        context = client.decisions.research_for_decision(research_id)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    return DecisionForm(context)


def submit_decision(
    client: RSCMPClient, form: DecisionForm, toaster: Optional[Toaster] = None
) -> Optional[Decision]:
    """Record the decision and attach it to the form's context so the form turns read-only."""
    request = form.to_request()
    try:
        decision = client.decisions.create(request)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    form.context = form.context.model_copy(update={"existing_decision": decision})
    _succeed(toaster)
    logger.info("Decision recorded", research_id=request.research_id, decision=decision.decision)
    return decision


# Notifications


def refresh_unread_count(client: RSCMPClient) -> int:
    """Sync the cached counter with the server; failures keep the cached value."""
    store = client.notification_store
    count = safe_api_call(client.notifications.unread_count, default=None)
    if count is not None:
        store.set_unread_count(count)
    return store.unread_count


def ensure_unread_count(client: RSCMPClient) -> int:
    """Fetch the unread count only when the cached value has been invalidated."""
    if client.notification_store.is_stale:
        return refresh_unread_count(client)
    return client.notification_store.unread_count


def refresh_notifications(
    client: RSCMPClient, unread_only: bool = False, toaster: Optional[Toaster] = None
) -> List[Notification]:
    """Fetch the (server-capped) notification list and resync the unread counter.

    The counter comes from the unread-count endpoint, never from the list length.
    """
    try:
        notifications = client.notifications.list(unread_only=unread_only)
    except RSCMPError as e:
        _fail(e, toaster)
        return []
    client.notification_store.invalidate()
    ensure_unread_count(client)
    return notifications


def mark_notification_read(
    client: RSCMPClient, notification: Notification, toaster: Optional[Toaster] = None
) -> Notification:
    """Mark one notification read; returns the updated (or unchanged) notification."""
    try:
        client.notifications.mark_read(notification.id)
    except RSCMPError as e:
        _fail(e, toaster)
        return notification
    client.notification_store.mark_read(notification)
    return notification.model_copy(update={"is_read": True})


def mark_all_notifications_read(
    client: RSCMPClient,
    notifications: Optional[List[Notification]] = None,
    toaster: Optional[Toaster] = None,
) -> List[Notification]:
    notifications = list(notifications or [])
    try:
        client.notifications.mark_all_read()
    except RSCMPError as e:
        _fail(e, toaster)
        return notifications
    client.notification_store.clear_unread_count()
    _succeed(toaster, MSG_ALL_MARKED_READ)
    return [n.model_copy(update={"is_read": True}) for n in notifications]


# Contact


def send_contact_message(
    client: RSCMPClient, data: Dict[str, Any], toaster: Optional[Toaster] = None
) -> bool:
    form = validate_form(ContactForm, data)
    try:
        client.contact.submit(ContactCreateRequest.model_validate(form.model_dump()))
    except RSCMPError as e:
        _fail(e, toaster)
        return False
    _succeed(toaster)
    return True


def reply_to_contact_message(
    client: RSCMPClient, message_id: str, response: str, toaster: Optional[Toaster] = None
) -> Optional[ContactMessage]:
    if not response.strip():
        if toaster is not None:
            toaster.error("الرد مطلوب | A reply is required")
        return None
    try:
        message = client.admin.reply_to_message(message_id, response)
    except RSCMPError as e:
        _fail(e, toaster)
        return None
    _succeed(toaster)
    return message
