"""Streamlit dashboard for the research conference management platform."""

import streamlit as st

from rscmp_client.client.errors import Toaster, ValidationFailed
from rscmp_client.client.services import RSCMPClient
from rscmp_client.config.constants import (
    DECISION_OPTIONS,
    ROLE_ADMIN,
    ROLE_CHAIRMAN,
    ROLE_PUBLIC,
    ROLE_REVIEWER,
)
from rscmp_client.config.settings import load_settings
from rscmp_client.core import actions
from rscmp_client.core.display import (
    notifications_to_dataframe,
    reviews_to_dataframe,
    submissions_to_dataframe,
)
from rscmp_client.core.forms import REVIEW_APPROVE, REVIEW_RETURN
from rscmp_client.core.routing import available_roles, guard_role
from rscmp_client.core.status import (
    ACTION_DELETE,
    ACTION_SUBMIT,
    count_by_status,
    project_status,
    recommendation_badge,
    submission_actions,
)
from rscmp_client.core.stores import AuthStore, MemoryStorage, SessionHints, UIStore
from rscmp_client.utils.logging_config import configure_logger, get_logger
from rscmp_client.utils.utils import save_blob

# Configure structured logging
logger = get_logger(__name__)

# Page configuration
st.set_page_config(
    page_title="RSCMP Dashboard",
    page_icon="📚",
    layout="wide",
    initial_sidebar_state="expanded",
)

DARK_CSS = """
<style>
.stApp { background-color: #0f172a; color: #e2e8f0; }
</style>
"""


def get_client() -> RSCMPClient:
    """One client per browser session; state lives in memory only."""
    if "client" not in st.session_state:
        settings = load_settings()
        configure_logger(log_level=settings.log_level)
        storage = MemoryStorage()
        st.session_state.client = RSCMPClient(
            settings, auth_store=AuthStore(storage), ui_store=UIStore(storage)
        )
        st.session_state.toaster = Toaster()
        st.session_state.hints = SessionHints()
    return st.session_state.client


def show_toasts() -> None:
    for toast in st.session_state.toaster.drain():
        if toast.level == "error":
            st.error(toast.message)
        elif toast.level == "success":
            st.success(toast.message)
        else:
            st.info(toast.message)


def show_validation(error: ValidationFailed) -> None:
    for field_name, messages in error.errors.items():
        st.error(f"**{field_name}**: {'; '.join(messages)}")


def login_page(client: RSCMPClient) -> None:
    st.title("📚 Research Conference Management")
    intended = st.selectbox(
        "I am a...", ["", "researcher", "reviewer", "chairman", "admin"], index=0
    )
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")
    if submitted:
        if intended:
            st.session_state.hints.set(actions.INTENDED_ROLE_HINT, intended)
        route = actions.login(
            client, email, password, hints=st.session_state.hints, toaster=st.session_state.toaster
        )
        if route is not None:
            st.rerun()


def role_selection_page(client: RSCMPClient) -> None:
    st.header("Select a role")
    user = client.auth_store.user
    for role in available_roles(user):
        if st.button(role, key=f"role-{role}"):
            actions.select_role(client, role, st.session_state.toaster)
            st.rerun()


def sidebar(client: RSCMPClient) -> None:
    store = client.auth_store
    ui = client.ui_store
    lang = client.settings.language
    with st.sidebar:
        st.header("🔧 Controls")
        st.write(f"**{store.user.display_name(lang)}**")
        st.write(f"Role: {store.selected_role}")
        st.metric("Unread notifications", actions.ensure_unread_count(client))

        if st.toggle("Dark mode", value=ui.is_dark_mode) != ui.is_dark_mode:
            ui.toggle_dark_mode()
            st.rerun()
        if len(available_roles(store.user)) > 1 and st.button("Switch role"):
            store.clear_selected_role()
            st.rerun()
        if st.button("🔄 Refresh"):
            actions.refresh_unread_count(client)
            st.rerun()
        if st.button("Log out"):
            actions.logout(client)
            st.rerun()


def my_submissions_page(client: RSCMPClient) -> None:
    lang = client.settings.language
    st.header("📋 My Submissions")
    submissions = actions.load_my_submissions(client, st.session_state.toaster)

    counts = count_by_status(submissions)
    cols = st.columns(5)
    for col, (label, key) in zip(
        cols,
        [("Total", "total"), ("Drafts", "draft"), ("Under review", "under_review"),
         ("Approved", "approved"), ("Rejected", "rejected")],
    ):
        col.metric(label, counts[key])

    st.dataframe(
        submissions_to_dataframe(submissions, lang, use_colors=False),
        use_container_width=True,
        hide_index=True,
    )

    for research in submissions:
        enabled = submission_actions(research)
        if not enabled:
            continue
        badge = project_status(research.status, lang)
        with st.expander(f"{research.title(lang)} ({badge.label})"):
            uploaded = st.file_uploader("Main document (PDF)", type=["pdf"], key=f"up-{research.id}")
            if uploaded is not None and st.button("Upload", key=f"upb-{research.id}"):
                path = save_blob(uploaded.getvalue(), uploaded.name, client.settings.storage_dir)
                actions.upload_attachment(client, research, path, toaster=st.session_state.toaster)
            col1, col2 = st.columns(2)
            if ACTION_SUBMIT in enabled and col1.button("Submit", key=f"sub-{research.id}"):
                actions.submit_submission(client, research, st.session_state.toaster)
                st.rerun()
            if ACTION_DELETE in enabled and col2.button("Delete", key=f"del-{research.id}"):
                actions.delete_submission(client, research, st.session_state.toaster)
                st.rerun()


def reviewer_page(client: RSCMPClient) -> None:
    lang = client.settings.language
    toaster = st.session_state.toaster
    st.header("📝 Reviews")
    pending = actions.load_pending_reviews(client, toaster)
    st.dataframe(reviews_to_dataframe(pending, lang, use_colors=False), hide_index=True)
    if not pending:
        return

    review_id = st.selectbox("Review", [r.id for r in pending])
    loaded = actions.load_review_form(client, review_id, toaster)
    if loaded is None:
        return
    review, research, form = loaded
    st.subheader(research.title(lang))

    if not review.is_editable:
        if st.button("Start review"):
            actions.start_review(client, review.id, toaster)
            st.rerun()
        reason = st.text_input("Decline reason")
        if st.button("Decline"):
            actions.decline_review(client, review.id, reason or None, toaster)
            st.rerun()
        return

    with st.form(f"review-{review.id}"):
        values = {}
        for criterion in form.criteria:
            current = form.scores.get(criterion.id)
            values[criterion.id] = st.number_input(
                f"{criterion.name_en} ({criterion.min_score}-{criterion.max_score})",
                min_value=float(criterion.min_score),
                max_value=float(criterion.max_score),
                value=None if current is None else float(current),
                key=f"score-{review.id}-{criterion.id}",
            )
        form.comments_to_author = st.text_area("Comments to author", form.comments_to_author)
        form.comments_to_chairman = st.text_area("Comments to chairman", form.comments_to_chairman)
        recommendation = st.radio(
            "Recommendation",
            DECISION_OPTIONS,
            format_func=lambda value: recommendation_badge(value, lang).label,
            index=DECISION_OPTIONS.index(form.recommendation),
        )
        submitted = st.form_submit_button("Submit review", type="primary")

    for criteria_id, value in values.items():
        if value is not None:
            form.set_score(criteria_id, value)
    form.set_recommendation(recommendation)
    if form.preview_average() is not None:
        st.caption(f"Average of entered scores: {form.preview_average():.2f}")
    if submitted:
        if not form.can_submit:
            st.warning("All criteria must be scored before submitting")
            return
        actions.submit_review(client, review.id, form, toaster)
        st.rerun()


def chairman_page(client: RSCMPClient) -> None:
    lang = client.settings.language
    toaster = st.session_state.toaster
    st.header("⚖️ Decisions")
    pending = actions.load_pending_decisions(client, toaster)
    st.dataframe(submissions_to_dataframe(pending, lang, use_colors=False), hide_index=True)
    if not pending:
        return

    research_id = st.selectbox("Research", [r.id for r in pending])
    form = actions.load_decision_form(client, research_id, toaster)
    if form is None:
        return

    summary = form.context.summary
    st.metric("Average score", f"{summary.average_score:.2f}" if summary.average_score is not None else "N/A")
    for review in form.context.reviews:
        with st.expander(f"{review.reviewer_name or review.id}: {review.recommendation or ''}"):
            st.write(review.comments_to_chairman or "")
            if not form.is_read_only:
                choice = st.radio(
                    "Action",
                    [REVIEW_APPROVE, REVIEW_RETURN],
                    index=0 if review.is_chair_approved else None,
                    key=f"act-{review.id}",
                    horizontal=True,
                )
                form.handle_review(review.id, choice)

    if form.is_read_only:
        st.info(f"Decision: {form.decision}")
        return
    if form.warning:
        st.warning(form.warning)
    decision = st.radio(
        "Decision", DECISION_OPTIONS, format_func=lambda value: recommendation_badge(value, lang).label
    )
    form.set_decision(decision)
    form.justification = st.text_area("Justification")
    form.comments_to_author = st.text_area("Comments to author")
    if st.button("Submit decision", type="primary", disabled=not form.can_submit):
        try:
            actions.submit_decision(client, form, toaster)
        except ValidationFailed as e:
            show_validation(e)
            return
        st.rerun()


def admin_page(client: RSCMPClient) -> None:
    lang = client.settings.language
    st.header("🗂️ All Submissions")
    page_number = st.number_input("Page", min_value=1, value=1, step=1)
    search = st.text_input("Search")
    page = actions.load_submissions_page(
        client, page=int(page_number), search=search or None, toaster=st.session_state.toaster
    )
    st.dataframe(submissions_to_dataframe(page.items, lang, use_colors=False), hide_index=True)
    st.caption(f"Page {page.page_number} of {max(page.total_pages, 1)} ({page.total_count} total)")


def notifications_page(client: RSCMPClient) -> None:
    lang = client.settings.language
    notifications = actions.refresh_notifications(client, toaster=st.session_state.toaster)
    st.dataframe(notifications_to_dataframe(notifications, lang), hide_index=True)
    if st.button("Mark all as read"):
        actions.mark_all_notifications_read(client, notifications, st.session_state.toaster)
        st.rerun()


ROLE_PAGES = {
    ROLE_PUBLIC: my_submissions_page,
    ROLE_REVIEWER: reviewer_page,
    ROLE_CHAIRMAN: chairman_page,
    ROLE_ADMIN: admin_page,
}


def main():
    """Main Streamlit application."""
    client = get_client()
    store = client.auth_store

    if client.ui_store.is_dark_mode:
        st.markdown(DARK_CSS, unsafe_allow_html=True)

    if not store.is_authenticated or store.user is None:
        login_page(client)
        show_toasts()
        return

    if store.needs_role_selection:
        role_selection_page(client)
        show_toasts()
        return

    page_role = store.selected_role if store.selected_role in ROLE_PAGES else ROLE_PUBLIC
    if guard_role(store, page_role) is not None:
        store.clear_selected_role()
        st.rerun()

    sidebar(client)
    tab1, tab2 = st.tabs(["📋 Dashboard", "🔔 Notifications"])
    with tab1:
        ROLE_PAGES[page_role](client)
    with tab2:
        notifications_page(client)
    show_toasts()


if __name__ == "__main__":
    main()
