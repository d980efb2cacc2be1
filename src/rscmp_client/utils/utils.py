"""Small helpers shared by the display layer, the CLI and the actions."""

import os
import re
from typing import Optional

from rscmp_client.core.models import Language
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)


def localized(english: Optional[str], arabic: Optional[str], language: str = "en") -> str:
    """Pick the text for the active language, falling back to the other one."""
    if language == Language.ARABIC.value:
        return arabic or english or ""
    return english or arabic or ""


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``1.5 MB``."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def safe_filename(name: str, max_length: int = 100) -> str:
    """Strip path separators and characters that are awkward on common filesystems."""
    cleaned = re.sub(r"[\\/:*?\"<>|]+", "_", os.path.basename(name)).strip()
    return cleaned[:max_length] or "download"


def save_blob(content: bytes, filename: str, directory: str = ".") -> str:
    """Write downloaded bytes to ``directory`` and return the resulting path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, safe_filename(filename))
    with open(path, "wb") as f:
        f.write(content)
    logger.info("Saved file", path=path, size=len(content))
    return path


def truncate(text: Optional[str], length: int = 60) -> str:
    if not text:
        return ""
    return text if len(text) <= length else text[: length - 3] + "..."
