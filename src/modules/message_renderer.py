"""
Message Renderer Module
Turns a parsed EmailMessage into console output, JSON summaries and files on disk

This is the consumer side of the parser: it never talks to the decoder and
only reads finished EmailMessage / EmailAttachment records.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .email_message import EmailAttachment, EmailMessage
from ..utils.colors import Colors
from ..utils.sanitization import sanitize_for_display, sanitize_for_logging
from ..utils.security_validators import (
    is_within_directory,
    sanitize_filename,
    unique_path,
)


logger = logging.getLogger(__name__)

MSG_SUFFIX = ".msg"


def find_msg_files(directory: Union[str, Path]) -> List[Path]:
    """
    List the .msg files directly inside ``directory``

    Matches "*.msg" and "*.MSG" (any case), sorted by name. Subdirectories
    are not searched.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() == MSG_SUFFIX
    )


def message_to_dict(message: EmailMessage) -> Dict[str, Any]:
    """JSON-ready summary of a message; attachment payloads are omitted"""
    if not message.is_valid:
        return {"is_valid": False, "error_message": message.error_message}

    return {
        "is_valid": True,
        "subject": message.subject,
        "sender_name": message.sender_name,
        "sender_email": message.sender_email,
        "to": message.to_recipients,
        "cc": message.cc_recipients,
        "bcc": message.bcc_recipients,
        "date": message.date.isoformat() if message.date else None,
        "body_plain_text": message.body_plain_text,
        "body_html": message.body_html,
        "attachments": [
            {
                "filename": attachment.filename,
                "mime_type": attachment.mime_type,
                "size": attachment.size,
            }
            for attachment in message.attachments
        ],
    }


def render_message(message: EmailMessage, color: bool = False) -> str:
    """
    Render a message as a plain-text block

    Layout: header fields, a blank line, the display body (HTML when
    present), then an attachments table.
    """
    if not message.is_valid:
        return Colors.error(f"Error: {message.error_message}", color)

    lines = []
    header_fields = [
        ("From", message.sender_display),
        ("To", message.to_recipients),
        ("Cc", message.cc_recipients),
        ("Date", message.date_display),
        ("Subject", message.subject),
    ]
    width = max(len(name) for name, _ in header_fields) + 1
    for name, value in header_fields:
        label = Colors.label(f"{name + ':':<{width}}", color)
        lines.append(f"{label} {sanitize_for_display(value)}")

    lines.append("")
    body = message.display_body
    lines.append(sanitize_for_display(body) if body else Colors.dim("(no body)", color))

    if message.attachments:
        lines.append("")
        lines.append(Colors.label(f"Attachments ({len(message.attachments)}):", color))
        name_width = max(len(a.filename) for a in message.attachments)
        for attachment in message.attachments:
            filename = sanitize_for_display(attachment.filename)
            size = Colors.dim(attachment.size_display, color)
            lines.append(f"  {filename:<{name_width}}  {size}")

    return "\n".join(lines)


def log_message_summary(message: EmailMessage, path: str) -> None:
    """Write the per-file status lines to the log"""
    safe_path = sanitize_for_logging(path)
    if not message.is_valid:
        logger.error(f"Failed to load {safe_path}: {message.error_message}")
        return

    logger.info(f"Loaded: {safe_path}")
    if message.has_html_body:
        logger.info(f"Body: HTML ({len(message.body_html)} chars)")
    else:
        logger.info(f"Body: Plain text ({len(message.body_plain_text)} chars)")

    if message.attachments:
        logger.info(f"Attachments: {len(message.attachments)} found")
        for attachment in message.attachments:
            logger.info(
                f"  - {sanitize_for_logging(attachment.filename)} "
                f"({attachment.size_display})"
            )


def save_attachment(
    attachment: EmailAttachment,
    directory: Union[str, Path],
    filename: Optional[str] = None,
    overwrite: bool = False,
) -> Path:
    """
    Write an attachment's payload to ``directory``

    SECURITY STORY: The name comes from the MSG file, so it is sanitized and
    the final path is checked to stay inside ``directory``.

    Args:
        attachment: Attachment to save
        directory: Target directory (created if missing)
        filename: Name to use instead of the attachment's own
        overwrite: Replace an existing file instead of picking a new name

    Returns:
        Path of the written file

    Raises:
        OSError: If the file cannot be written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    safe_name = sanitize_filename(filename or attachment.filename)
    target = directory / safe_name if overwrite else unique_path(directory, safe_name)
    if not is_within_directory(directory, target):
        raise OSError(f"Refusing to write outside {directory}: {safe_name}")

    target.write_bytes(attachment.data)
    logger.info(f"Saved attachment: {sanitize_for_logging(str(target))}")
    return target
