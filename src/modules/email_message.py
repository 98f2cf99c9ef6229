"""
Email Message Model
Contains the EmailMessage and EmailAttachment dataclasses produced by the MSG parser
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class EmailAttachment:
    """
    One binary attachment of a decoded message

    The payload is the only source of truth for the size: no size reported
    by the decoder is trusted.
    """
    filename: str
    mime_type: str = ""
    data: bytes = b""

    @property
    def size(self) -> int:
        """Byte length of the payload"""
        return len(self.data)

    @property
    def size_display(self) -> str:
        """Human-readable size (B / KB / MB, integer division)"""
        size = self.size
        if size < 1024:
            return f"{size} B"
        if size < 1024 * 1024:
            return f"{size // 1024} KB"
        return f"{size // (1024 * 1024)} MB"


@dataclass(frozen=True)
class EmailMessage:
    """
    Canonical record for one decoded MSG message

    Empty strings mean "absent". ``is_valid`` is the single source of truth:
    when it is False only ``error_message`` carries information.

    MAINTENANCE WISDOM: ``bcc_recipients`` is part of the shape but the
    parser never fills it. Treat it as always empty.
    """
    subject: str = ""
    body_plain_text: str = ""
    body_html: str = ""
    sender_name: str = ""
    sender_email: str = ""
    to_recipients: str = ""
    cc_recipients: str = ""
    bcc_recipients: str = ""
    date: Optional[datetime] = None
    attachments: Tuple[EmailAttachment, ...] = field(default_factory=tuple)
    is_valid: bool = False
    error_message: str = ""

    @classmethod
    def failure(cls, error_message: str) -> "EmailMessage":
        """Build an invalid record that carries only the error"""
        return cls(is_valid=False, error_message=error_message)

    @property
    def has_html_body(self) -> bool:
        return bool(self.body_html)

    @property
    def display_body(self) -> str:
        """HTML body when present, plain text otherwise"""
        return self.body_html if self.body_html else self.body_plain_text

    @property
    def date_display(self) -> str:
        """Local-time ISO-8601 date, or empty string when unknown"""
        if self.date is None:
            return ""
        try:
            return self.date.astimezone().isoformat(timespec="seconds")
        except (OverflowError, ValueError, OSError):
            # Boundary dates cannot always be shifted into the local zone
            return self.date.isoformat(timespec="seconds")

    @property
    def sender_display(self) -> str:
        if self.sender_name and self.sender_email:
            if self.sender_email in self.sender_name:
                return self.sender_name
            return f"{self.sender_name} <{self.sender_email}>"
        return self.sender_name or self.sender_email
