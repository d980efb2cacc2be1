"""Command line interface for the RSCMP client."""

import argparse
import getpass
import sys
from functools import partial
from typing import List, Optional

from rscmp_client.client.errors import RSCMPError, Toaster, ValidationFailed, report_error
from rscmp_client.client.services import RSCMPClient, iter_pages
from rscmp_client.config.constants import ROLE_SELECTION_ORDER
from rscmp_client.config.settings import ClientSettings, list_available_languages, load_settings
from rscmp_client.core import actions
from rscmp_client.core.display import (
    Colors,
    display_submissions,
    notifications_to_dataframe,
    print_page_footer,
    print_submission_detail,
    print_table_with_format,
    reviews_to_dataframe,
    save_to_csv,
    submissions_to_dataframe,
)
from rscmp_client.core.routing import available_roles
from rscmp_client.core.stores import AuthStore, JsonStorage, SessionHints, UIStore
from rscmp_client.utils.logging_config import configure_logger, get_logger

logger = get_logger(__name__)

TABLE_FORMATS = ["grid", "pipe", "simple", "github"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="rscmp", description="Research conference management client"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (defaults to RSCMP_LOG_LEVEL)",
    )
    parser.add_argument(
        "--format", choices=TABLE_FORMATS, default="grid", help="Table format for display"
    )
    parser.add_argument(
        "--lang", choices=list_available_languages(), default=None, help="Display language"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in and store the session")
    login.add_argument("--email", required=True)
    login.add_argument("--password", help="Prompted for when omitted")
    login.add_argument(
        "--as",
        dest="intended_role",
        choices=["researcher", "reviewer", "chairman", "admin"],
        help="Land directly on this role's dashboard when you hold it",
    )

    sub.add_parser("logout", help="Clear the stored session")
    sub.add_parser("whoami", help="Show the current user and active role")

    select = sub.add_parser("select-role", help="Choose the active role")
    select.add_argument("role", choices=ROLE_SELECTION_ORDER)

    submissions = sub.add_parser("submissions", help="List submissions")
    submissions.add_argument(
        "--all", action="store_true", help="List all submissions (chairman/admin) instead of your own"
    )
    submissions.add_argument("--page", type=int, default=1)
    submissions.add_argument("--status", type=str, default=None)
    submissions.add_argument("--search", type=str, default=None)
    submissions.add_argument("--output", type=str, help="Save results to CSV file")

    detail = sub.add_parser("submission", help="Show one submission")
    detail.add_argument("research_id")

    submit = sub.add_parser("submit", help="Submit a draft for review")
    submit.add_argument("research_id")

    notifications = sub.add_parser("notifications", help="List notifications")
    notifications.add_argument("--unread", action="store_true", help="Only unread notifications")
    notifications.add_argument("--mark-all", action="store_true", help="Mark all as read")

    reviews = sub.add_parser("reviews", help="List assigned reviews")
    reviews.add_argument("--completed", action="store_true", help="Show completed reviews")

    export = sub.add_parser("export-submissions", help="Export every submission page to CSV")
    export.add_argument("output", type=str)
    export.add_argument("--conference", type=str, default=None)
    export.add_argument("--status", type=str, default=None)

    return parser.parse_args(argv)


def build_client(settings: ClientSettings) -> RSCMPClient:
    storage = JsonStorage(settings.storage_dir)
    return RSCMPClient(
        settings,
        auth_store=AuthStore(storage),
        ui_store=UIStore(storage),
    )


def flush_toasts(toaster: Toaster) -> None:
    for toast in toaster.drain():
        color = Colors.RED if toast.level == "error" else Colors.GREEN
        stream = sys.stderr if toast.level == "error" else sys.stdout
        print(f"{color}{toast.message}{Colors.END}", file=stream)


def _require_login(client: RSCMPClient) -> bool:
    if not client.auth_store.is_authenticated:
        print("Not logged in. Run: rscmp login --email <email>", file=sys.stderr)
        return False
    return True


def cmd_login(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    password = args.password or getpass.getpass("Password: ")
    hints = SessionHints()
    if args.intended_role:
        hints.set(actions.INTENDED_ROLE_HINT, args.intended_role)
    route = actions.login(client, args.email, password, hints=hints, toaster=toaster)
    if route is None:
        return 1
    user = client.auth_store.user
    print(f"Logged in as {user.display_name(client.settings.language)}")
    if route.role is None:
        roles = ", ".join(available_roles(user))
        print(f"Choose a role with: rscmp select-role <role>  ({roles})")
    else:
        print(f"Active role: {route.role} ({route.path})")
    return 0


def cmd_logout(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    actions.logout(client)
    print("Logged out")
    return 0


def cmd_whoami(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    user = actions.bootstrap_session(client, toaster)
    if user is None:
        return 1
    print(f"{user.display_name(client.settings.language)} <{user.email}>")
    print(f"Roles: {', '.join(user.roles) or 'Public'}")
    print(f"Active role: {client.auth_store.selected_role or '(none selected)'}")
    print(f"Unread notifications: {client.notification_store.unread_count}")
    return 0


def cmd_select_role(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client) or actions.bootstrap_session(client, toaster) is None:
        return 1
    path = actions.select_role(client, args.role, toaster)
    if path is None:
        return 1
    print(f"Active role: {args.role} ({path})")
    return 0


def cmd_submissions(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    lang = client.settings.language
    if args.all:
        page = client.research.list(
            status=args.status,
            page=args.page,
            page_size=client.settings.page_size,
            search=args.search,
        )
        print_table_with_format(submissions_to_dataframe(page.items, lang), args.format)
        print_page_footer(page)
        if args.output:
            save_to_csv(page.items, args.output, lang)
        return 0
    submissions = client.research.my_submissions()
    display_submissions(submissions, args.format, lang, args.output)
    return 0


def cmd_submission(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    print_submission_detail(client.research.get(args.research_id), client.settings.language)
    return 0


def cmd_submit(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    research = client.research.get(args.research_id)
    before = research.status
    research = actions.submit_submission(client, research, toaster)
    flush_toasts(toaster)
    print_submission_detail(research, client.settings.language)
    return 0 if research.status != before else 1


def cmd_notifications(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    notifications = actions.refresh_notifications(client, unread_only=args.unread, toaster=toaster)
    if args.mark_all:
        notifications = actions.mark_all_notifications_read(client, notifications, toaster)
    print_table_with_format(
        notifications_to_dataframe(notifications, client.settings.language), args.format
    )
    print(f"Unread: {client.notification_store.unread_count}")
    return 0


def cmd_reviews(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    reviews = client.reviews.completed() if args.completed else client.reviews.pending()
    print_table_with_format(reviews_to_dataframe(reviews, client.settings.language), args.format)
    return 0


def cmd_export_submissions(client: RSCMPClient, args: argparse.Namespace, toaster: Toaster) -> int:
    if not _require_login(client):
        return 1
    fetch = partial(client.research.list, conference_id=args.conference, status=args.status)
    submissions = list(
        iter_pages(fetch, page_size=client.settings.page_size, desc="Fetching submissions...")
    )
    save_to_csv(submissions, args.output, client.settings.language)
    return 0


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "select-role": cmd_select_role,
    "submissions": cmd_submissions,
    "submission": cmd_submission,
    "submit": cmd_submit,
    "notifications": cmd_notifications,
    "reviews": cmd_reviews,
    "export-submissions": cmd_export_submissions,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``rscmp`` console script."""
    args = parse_args(argv)
    settings = load_settings()
    if args.lang:
        settings.language = args.lang

    # Configure logging first
    configure_logger(log_level=args.log_level or settings.log_level)
    logger.debug("Running command", command=args.command, base_url=settings.base_url)

    toaster = Toaster()
    with build_client(settings) as client:
        try:
            code = COMMANDS[args.command](client, args, toaster)
        except ValidationFailed as e:
            for field_name, messages in e.errors.items():
                print(f"{field_name}: {'; '.join(messages)}", file=sys.stderr)
            code = 1
        except RSCMPError as e:
            if report_error(e, toaster) is None:
                print(str(e), file=sys.stderr)
            code = 1
        flush_toasts(toaster)
    return code


if __name__ == "__main__":
    sys.exit(main())
