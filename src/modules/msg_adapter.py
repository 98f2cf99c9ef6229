"""
MSG Decoder Adapter Module
Bridges the external MSG decoder (extract_msg by default) to the parser

PATTERN RECOGNITION: This is an Adapter - the decoder exposes a loosely typed
object graph (strings, bytes, ints, datetimes, lists, None, or attributes that
raise on access), and this module narrows it to a handful of accessors that
each return a plain value or the field's "absent" value. Nothing in here lets
a single bad field escape as an exception.

SECURITY STORY: The decoder is third-party code running over untrusted
files. Accessors catch ``Exception`` from it so that a malformed property in
one attachment cannot abort the extraction of the rest of the message.
"""

import importlib
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional

from ..utils.config import DecoderConfig
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)


class OpenError(Exception):
    """The decoder could not produce a message handle"""


class CapabilityUnavailable(OpenError):
    """The decoder module could not be loaded; permanent for the context"""


class OpenFailed(OpenError):
    """The decoder rejected a specific file"""

    def __init__(self, path: str, reason: Optional[BaseException] = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to open MSG file: {path}")


# ---------------------------------------------------------------------------
# Field accessors
#
# Each accessor takes any decoder object (the message itself, a recipient or
# an attachment) and a field name. They never raise.
# ---------------------------------------------------------------------------

def read_field(source: Any, name: str) -> Optional[Any]:
    """Return the raw attribute value, or None if missing or failing"""
    if source is None:
        return None
    try:
        return getattr(source, name, None)
    except Exception as e:
        logger.debug(f"Field '{name}' unreadable: {type(e).__name__}: {e}")
        return None


def to_text(value: Any) -> str:
    """Convert a decoder value to text; empty string if not possible"""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    try:
        return str(value)
    except Exception as e:
        logger.debug(f"Value not convertible to text: {type(e).__name__}: {e}")
        return ""


def to_bytes(value: Any) -> bytes:
    """Convert a decoder value to bytes; empty bytes if not possible"""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    # bytes(n) would build n zero bytes instead of failing
    if isinstance(value, int):
        return b""
    try:
        return bytes(value)
    except Exception as e:
        logger.debug(f"Value not convertible to bytes: {type(e).__name__}: {e}")
        return b""


def get_string(source: Any, name: str) -> str:
    return to_text(read_field(source, name))


def get_bytes(source: Any, name: str) -> bytes:
    return to_bytes(read_field(source, name))


def get_bytes_from_callable(source: Any, name: str) -> bytes:
    """
    Read a payload exposed either as a zero-argument method or as a property

    Callable values are invoked and their result coerced; anything else is
    coerced directly.
    """
    value = read_field(source, name)
    if callable(value):
        try:
            value = value()
        except Exception as e:
            logger.debug(f"Callable field '{name}' failed: {type(e).__name__}: {e}")
            return b""
    return to_bytes(value)


def get_int(source: Any, name: str) -> Optional[int]:
    value = read_field(source, name)
    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    return None


def get_timestamp(source: Any, name: str) -> Optional[datetime]:
    """
    Read a date field as an aware datetime

    Tries the value's ``timestamp()`` method first (seconds since the epoch),
    then ISO-8601 text. Returns None when both fail.
    """
    value = read_field(source, name)
    if value is None:
        return None

    timestamp_method = read_field(value, "timestamp")
    if callable(timestamp_method):
        try:
            seconds = timestamp_method()
            if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
                return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except Exception as e:
            logger.debug(f"timestamp() on '{name}' failed: {type(e).__name__}: {e}")

    text = to_text(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
    except (ValueError, OverflowError, OSError) as e:
        logger.debug(f"Field '{name}' is not a usable ISO-8601 date: {e}")
        return None
    return parsed


def get_list(source: Any, name: str) -> List[Any]:
    """Return the elements of a list-shaped field in order, else []"""
    value = read_field(source, name)
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


# ---------------------------------------------------------------------------
# Handle and context
# ---------------------------------------------------------------------------

class MsgHandle:
    """
    One opened decoder message

    Obtain it through ``DecoderContext.open`` so that ``close`` is guaranteed
    to run exactly once.
    """

    def __init__(self, message: Any, path: str = ""):
        self.message = message
        self.path = path
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def get_string(self, name: str) -> str:
        return get_string(self.message, name)

    def get_bytes(self, name: str) -> bytes:
        return get_bytes(self.message, name)

    def get_bytes_from_callable(self, name: str) -> bytes:
        return get_bytes_from_callable(self.message, name)

    def get_timestamp(self, name: str) -> Optional[datetime]:
        return get_timestamp(self.message, name)

    def get_list(self, name: str) -> List[Any]:
        return get_list(self.message, name)

    def close(self) -> None:
        """Release the decoder's resources; later calls are no-ops"""
        if self._closed:
            return
        self._closed = True

        close_method = read_field(self.message, "close")
        if not callable(close_method):
            return
        try:
            close_method()
        except Exception as e:
            logger.warning(
                f"Error closing MSG file {sanitize_for_logging(self.path)}: {e}"
            )


class DecoderContext:
    """
    Holds the lazily loaded decoder module

    The first call to ``initialize`` decides the outcome for the lifetime of
    the context: a failed import is remembered and never retried.

    Args:
        config: Decoder module/factory names
        module: Pre-loaded decoder module (skips the import)
    """

    def __init__(self, config: Optional[DecoderConfig] = None, module: Any = None):
        self.config = config or DecoderConfig()
        self._module = module
        self._initialized = module is not None
        self._error = ""
        self._lock = threading.RLock()

    @property
    def error(self) -> str:
        return self._error

    def initialize(self) -> bool:
        """Load the decoder module once; return whether it is available"""
        with self._lock:
            if self._initialized:
                return self._module is not None
            self._initialized = True

            name = self.config.module_name
            try:
                self._module = importlib.import_module(name)
            except Exception as e:
                self._error = f"Python {name} module not loaded"
                logger.error(f"Failed to import {name} module: {e}")
                return False

            logger.debug(f"Loaded MSG decoder module {name}")
            return True

    @contextmanager
    def open(self, path: str) -> Iterator[MsgHandle]:
        """
        Open ``path`` with the decoder and yield a handle

        The context lock is held until the handle is released.

        Raises:
            CapabilityUnavailable: the decoder module is not loaded
            OpenFailed: the decoder rejected the file
        """
        if not self.initialize():
            raise CapabilityUnavailable(self._error)

        with self._lock:
            factory_name = self.config.message_factory
            factory = read_field(self._module, factory_name)
            if not callable(factory):
                raise CapabilityUnavailable(
                    f"Failed to get {factory_name} class from {self.config.module_name}"
                )

            try:
                message = factory(path)
            except Exception as e:
                logger.error(
                    f"Decoder rejected {sanitize_for_logging(path)}: "
                    f"{type(e).__name__}: {sanitize_for_logging(str(e))}"
                )
                raise OpenFailed(path, e) from e
            if message is None:
                raise OpenFailed(path)

            handle = MsgHandle(message, path)
            try:
                yield handle
            finally:
                handle.close()
