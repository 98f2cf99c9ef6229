"""
MSG Parser Module
Normalizes a decoded Outlook MSG message into a structured EmailMessage

PATTERN RECOGNITION: This follows the Parser pattern - it takes a loosely
typed object graph (the decoder's message) and transforms it into a strict,
fully populated record (EmailMessage).

SECURITY STORY: Only two failures make a record invalid: the decoder module
is unavailable, or the decoder cannot open the file. Every field after that
degrades on its own - a message with one corrupt attachment still yields its
subject, body, sender and every other attachment.
"""

import logging
import re
from typing import Any, List, Optional, Tuple

from .email_message import EmailAttachment, EmailMessage
from .msg_adapter import (
    DecoderContext,
    MsgHandle,
    OpenError,
    get_bytes,
    get_bytes_from_callable,
    get_int,
    get_list,
    get_string,
)
from ..utils.config import DecoderConfig
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)

RECIPIENT_TO = 1
RECIPIENT_CC = 2

RECIPIENT_SEPARATOR = ", "

ATTACHMENT_FILENAME_FIELDS = ("longFilename", "shortFilename", "name")

# Address preceded by "<" or string start and followed by ">" or string end
SENDER_EMAIL_PATTERN = re.compile(
    r"(?:<|^)([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})(?:>|$)"
)
BRACKETED_ADDRESS_PATTERN = re.compile(r"\s*<[^>]+>\s*")
ANGLE_BRACKETS_PATTERN = re.compile(r"[<>]")


def split_sender(sender: str) -> Tuple[str, str]:
    """
    Split a combined sender string into (name, email)

    Example:
        >>> split_sender("Jane Doe <jane@example.com>")
        ('Jane Doe', 'jane@example.com')
        >>> split_sender("jane@example.com")
        ('jane@example.com', '')
        >>> split_sender("<jane@example.com>")
        ('<jane@example.com>', 'jane@example.com')
    """
    if not sender:
        return "", ""

    match = SENDER_EMAIL_PATTERN.search(sender)
    # A bare address anchored at both ends is not a bracketed address
    if not match or not ("<" in match.group(0) or ">" in match.group(0)):
        return sender, ""

    name = BRACKETED_ADDRESS_PATTERN.sub("", sender).strip()
    return (name or sender), match.group(1)


def strip_angle_brackets(value: str) -> str:
    return ANGLE_BRACKETS_PATTERN.sub("", value)


class MsgParser:
    """
    Parses Outlook MSG files into EmailMessage records

    MAINTENANCE WISDOM: Keep decoder access (msg_adapter) separate from the
    field rules here. Tests drive this class with a fake decoder module and
    never need a real MSG file.
    """

    def __init__(
        self,
        context: Optional[DecoderContext] = None,
        config: Optional[DecoderConfig] = None,
    ):
        """
        Initialize MSG parser

        Args:
            context: Decoder context shared across parses (created if omitted)
            config: Decoder configuration used when creating the context
        """
        self.context = context or DecoderContext(config)
        self.logger = logging.getLogger("MsgParser")

    def parse(self, file_path: str) -> EmailMessage:
        """
        Parse one MSG file

        Args:
            file_path: Path to the .msg file

        Returns:
            A valid EmailMessage, or an invalid one carrying error_message
        """
        file_path = str(file_path)
        safe_path = sanitize_for_logging(file_path)

        try:
            with self.context.open(file_path) as handle:
                message = self._normalize(handle)
        except OpenError as e:
            self.logger.error(f"Error parsing MSG file {safe_path}: {e}")
            return EmailMessage.failure(str(e))

        self.logger.debug(f"Parsed MSG file {safe_path}")
        return message

    def _normalize(self, handle: MsgHandle) -> EmailMessage:
        """Build the canonical record from an open handle"""
        sender_name, sender_email = split_sender(handle.get_string("sender"))
        to_recipients, cc_recipients = self._extract_recipients(handle)

        return EmailMessage(
            subject=handle.get_string("subject"),
            body_plain_text=handle.get_string("body"),
            body_html=self._extract_html_body(handle),
            sender_name=sender_name,
            sender_email=sender_email,
            to_recipients=to_recipients,
            cc_recipients=cc_recipients,
            date=handle.get_timestamp("date"),
            attachments=tuple(self._extract_attachments(handle)),
            is_valid=True,
        )

    def _extract_html_body(self, handle: MsgHandle) -> str:
        """
        Decode the HTML body as UTF-8

        An undecodable body stays empty; the renderer then falls back to
        the plain-text body.
        """
        html_bytes = handle.get_bytes("htmlBody")
        if not html_bytes:
            return ""
        try:
            return html_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            self.logger.debug(f"HTML body is not valid UTF-8: {e}")
            return ""

    def _extract_recipients(self, handle: MsgHandle) -> Tuple[str, str]:
        """
        Collect To and Cc addresses from the recipient list

        Each side independently falls back to the flat ``to``/``cc`` field
        (angle brackets removed) when the list yields nothing for it.
        """
        to_list: List[str] = []
        cc_list: List[str] = []

        for recipient in handle.get_list("recipients"):
            recipient_type = get_int(recipient, "type")
            if recipient_type is None:
                recipient_type = 0
            email = get_string(recipient, "email")
            if not email:
                continue

            if recipient_type == RECIPIENT_TO:
                to_list.append(email)
            elif recipient_type == RECIPIENT_CC:
                cc_list.append(email)

        to_recipients = RECIPIENT_SEPARATOR.join(to_list)
        cc_recipients = RECIPIENT_SEPARATOR.join(cc_list)

        if not to_recipients:
            to_recipients = strip_angle_brackets(handle.get_string("to"))
        if not cc_recipients:
            cc_recipients = strip_angle_brackets(handle.get_string("cc"))

        return to_recipients, cc_recipients

    def _extract_attachments(self, handle: MsgHandle) -> List[EmailAttachment]:
        attachments: List[EmailAttachment] = []
        for item in handle.get_list("attachments"):
            attachments.append(self._extract_attachment(item, len(attachments) + 1))
        return attachments

    def _extract_attachment(self, item: Any, position: int) -> EmailAttachment:
        """
        Normalize one decoder attachment

        Args:
            item: Decoder attachment object
            position: 1-based position among this message's attachments

        Returns:
            EmailAttachment, even when every sub-field is missing
        """
        filename = ""
        for field_name in ATTACHMENT_FILENAME_FIELDS:
            filename = get_string(item, field_name)
            if filename:
                break
        if not filename:
            filename = f"attachment_{position}"

        # Method first, then property
        data = get_bytes_from_callable(item, "data")
        if not data:
            data = get_bytes(item, "data")

        if not data:
            self.logger.debug(
                f"Attachment {sanitize_for_logging(filename)} has no payload"
            )

        return EmailAttachment(
            filename=filename,
            mime_type=get_string(item, "mimetype"),
            data=data,
        )
