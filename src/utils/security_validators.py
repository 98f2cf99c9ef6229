"""
Security Validators Module
Filename checks for writing decoder-supplied attachment names to disk

SECURITY STORY: Attachment names inside an MSG file are attacker-controlled.
A name like "../../.bashrc" must never escape the export directory.
"""

import logging
import re
from pathlib import Path

# Filename sanitization patterns to prevent path traversal (CWE-22)
FILENAME_SANITIZE_PATTERN = re.compile(r"[^\w\s\-_\.]")
FILENAME_COLLAPSE_DOTS_PATTERN = re.compile(r"\.{2,}")

MAX_FILENAME_LENGTH = 255
DEFAULT_ATTACHMENT_NAME = "unnamed_attachment"

# Windows reserved filenames that cannot be used regardless of extension
WINDOWS_RESERVED_NAMES = {
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9"
}

logger = logging.getLogger(__name__)


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal attacks (CWE-22)

    Whitelist approach: only alphanumerics, spaces, hyphens, underscores and
    single dots survive.

    Args:
        filename: Attachment filename from the MSG file

    Returns:
        Sanitized filename safe for filesystem operations

    Example:
        >>> sanitize_filename("../../etc/passwd")
        "passwd"
        >>> sanitize_filename("report.pdf")
        "report.pdf"
    """
    if not filename:
        return DEFAULT_ATTACHMENT_NAME

    # Drop path components before character filtering
    filename = filename.split("/")[-1].split("\\")[-1]

    sanitized = FILENAME_SANITIZE_PATTERN.sub("", filename)
    sanitized = FILENAME_COLLAPSE_DOTS_PATTERN.sub(".", sanitized)
    sanitized = sanitized.strip(". ")

    if not sanitized:
        return DEFAULT_ATTACHMENT_NAME

    # Reserved regardless of extension (CON.txt is invalid too)
    base_name = sanitized.split('.')[0].strip().upper()
    if base_name in WINDOWS_RESERVED_NAMES:
        sanitized = "_" + sanitized

    return sanitized[:MAX_FILENAME_LENGTH]


def unique_path(directory: Path, filename: str) -> Path:
    """
    Return a path in ``directory`` that does not exist yet

    "report.pdf" becomes "report (1).pdf", "report (2).pdf", ... as needed.
    """
    candidate = directory / filename
    if not candidate.exists():
        return candidate

    stem = candidate.stem
    suffix = candidate.suffix
    counter = 1
    while True:
        candidate = directory / f"{stem} ({counter}){suffix}"
        if not candidate.exists():
            logger.debug(f"Renamed {filename} to {candidate.name} to avoid overwrite")
            return candidate
        counter += 1


def is_within_directory(directory: Path, target: Path) -> bool:
    """Check that ``target`` resolves inside ``directory``"""
    try:
        target.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True
