"""Printing and display utilities for RSCMP data."""

from typing import Iterable, List, Optional

import pandas as pd
from tabulate import tabulate

from rscmp_client.core.models import Notification, PagedResult, Research, Review
from rscmp_client.core.status import (
    project_status,
    recommendation_badge,
    review_status_badge,
    submission_actions,
)
from rscmp_client.utils.utils import format_file_size, localized, truncate


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"
    ORANGE = "\033[38;5;208m"
    BOLD = "\033[1m"
    END = "\033[0m"


# Badge color name -> terminal color
BADGE_COLORS = {
    "gray": Colors.GRAY,
    "blue": Colors.BLUE,
    "yellow": Colors.YELLOW,
    "purple": Colors.MAGENTA,
    "green": Colors.GREEN,
    "red": Colors.RED,
    "orange": Colors.ORANGE,
}

def colorize(text: str, color: str) -> str:
    code = BADGE_COLORS.get(color)
    return f"{code}{text}{Colors.END}" if code else text


def submissions_to_dataframe(
    submissions: Iterable[Research], language: str = "en", use_colors: bool = True
) -> pd.DataFrame:
    """Convert submissions to a DataFrame; the status column is colored by its badge."""
    data = []
    for idx, research in enumerate(submissions):
        badge = project_status(research.status, language)
        status = colorize(badge.label, badge.color) if use_colors else badge.label
        conference = research.conference_name
        if conference is None and research.conference is not None:
            conference = localized(research.conference.name_en, research.conference.name_ar, language)
        data.append(
            {
                "#": idx + 1,
                "ID": research.id,
                "Number": research.submission_number or "",
                "Title": truncate(research.title(language)),
                "Conference": conference or "",
                "Status": status,
                "Actions": ", ".join(sorted(submission_actions(research))),
                "Submitted": research.submitted_at or "",
            }
        )
    return pd.DataFrame(data)


def reviews_to_dataframe(
    reviews: Iterable[Review], language: str = "en", use_colors: bool = True
) -> pd.DataFrame:
    data = []
    for review in reviews:
        badge = review_status_badge(review.status, language)
        recommendation = ""
        if review.recommendation:
            rec = recommendation_badge(review.recommendation, language)
            recommendation = colorize(rec.label, rec.color) if use_colors else rec.label
        data.append(
            {
                "ID": review.id,
                "Research": truncate(review.research_title or review.research_id),
                "Status": colorize(badge.label, badge.color) if use_colors else badge.label,
                "Due": review.due_date or "",
                "Score": f"{review.overall_score:.2f}" if review.overall_score is not None else "",
                "Recommendation": recommendation,
            }
        )
    return pd.DataFrame(data)


def notifications_to_dataframe(
    notifications: Iterable[Notification], language: str = "en"
) -> pd.DataFrame:
    data = [
        {
            "ID": n.id,
            "Read": "" if n.is_read else "●",
            "Title": n.title(language),
            "Message": truncate(n.message(language), 80),
            "Created": n.created_at or "",
        }
        for n in notifications
    ]
    return pd.DataFrame(data)


def format_table(df: pd.DataFrame, table_format: str = "grid") -> str:
    if df.empty:
        return "(no results)"
    return tabulate(df, headers="keys", tablefmt=table_format, showindex=False)


def print_table_with_format(df: pd.DataFrame, table_format: str = "grid") -> None:
    """Print DataFrame with specified format."""
    print(format_table(df, table_format))
    print()


def print_page_footer(page: PagedResult) -> None:
    print(
        f"Page {page.page_number} of {max(page.total_pages, 1)} "
        f"({page.total_count} total)"
    )


def print_submission_detail(research: Research, language: str = "en") -> None:
    badge = project_status(research.status, language)
    print(f"{Colors.BOLD}{research.title(language)}{Colors.END}")
    print(f"Status: {colorize(badge.label, badge.color)}")
    if research.submission_number:
        print(f"Submission number: {research.submission_number}")
    abstract = localized(research.abstract_en, research.abstract_ar, language)
    if abstract:
        print(f"\n{abstract}\n")
    if research.authors:
        print("Authors:")
        for author in research.authors:
            marker = " (corresponding)" if author.is_corresponding else ""
            print(f"  - {author.full_name_en} <{author.email}>{marker}")
    if research.files:
        print("Files:")
        for f in research.files:
            name = f.original_file_name or f.file_name
            print(f"  - [{f.id}] {name} ({f.file_type}, {format_file_size(f.file_size)})")
    actions = submission_actions(research)
    print(f"Available actions: {', '.join(sorted(actions)) if actions else 'none'}")


def save_to_csv(submissions: List[Research], filename: str, language: str = "en") -> None:
    """Save submissions to a CSV file without color codes."""
    df = submissions_to_dataframe(submissions, language=language, use_colors=False)
    df.to_csv(filename, index=False)
    print(f"Results saved to {filename}")


def display_submissions(
    submissions: List[Research],
    table_format: str = "grid",
    language: str = "en",
    output_file: Optional[str] = None,
) -> None:
    print(f"\nFound {len(submissions)} submissions\n")
    print_table_with_format(submissions_to_dataframe(submissions, language), table_format)
    if output_file:
        save_to_csv(submissions, output_file, language)
