"""
Sanitization Utility Module
Makes decoder-supplied text (paths, subjects, filenames) safe to log and print.
"""

import re
import unicodedata

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: str, max_length: int = 255) -> str:
    """
    Sanitize text for safe logging to prevent Log Injection (CRLF) and terminal manipulation.

    SECURITY STORY: Subjects and attachment names come straight out of an
    untrusted file. A subject containing "\\nERROR - ..." would otherwise forge
    a log line, and ANSI sequences could rewrite the operator's terminal.

    Args:
        text: The input string to sanitize.
        max_length: Maximum allowed length for the log entry (truncates if longer).

    Returns:
        Sanitized string safe for logging.
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text)

    text = text.replace('\n', '\\n').replace('\r', '\\r')

    text = ANSI_ESCAPE_PATTERN.sub('', text)

    # Remaining control characters (ASCII 0-31 except tab)
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def sanitize_for_display(text: str) -> str:
    """
    Strip terminal escape sequences from multi-line text before printing

    Unlike ``sanitize_for_logging`` this keeps newlines and does not truncate,
    so message bodies stay readable.
    """
    if not text:
        return ""
    text = ANSI_ESCAPE_PATTERN.sub('', text)
    return "".join(ch for ch in text if ch in '\t\n' or ord(ch) >= 32)
