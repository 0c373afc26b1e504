"""
Email Parser Module
Wraps the standard library MIME parser behind a narrow, read-only interface

PATTERN RECOGNITION: This is an Adapter. The normalization pipeline never
touches ``email.message.EmailMessage`` directly; it asks a MimeMessage for raw
headers, address lists per role, decoded bodies and attachments. Swapping the
underlying MIME parser means rewriting only this module.

SECURITY STORY: Message text is untrusted. The adapter caps the number of MIME
parts it walks (MIME bombs) and the size of each decoded body (memory
exhaustion), and decodes unknown charsets with replacement characters instead
of failing.
"""

import email
import logging
import re
from dataclasses import dataclass
from datetime import timezone
from email import policy
from email.message import EmailMessage, Message
from typing import List, Optional, Tuple

from .errors import EmailParseFailed
from ..utils.config import ParserConfig


logger = logging.getLogger(__name__)

# Reply/forward prefixes stripped to derive the thread name, e.g. "Re: Fwd: Hi"
THREAD_PREFIX_PATTERN = re.compile(
    r"^(?:\s*(?:re|fwd?|aw|wg|sv|vs|antw)(?:\[\d+\])?\s*:)+\s*",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Attachment:
    """A non-body leaf part with its text content decoded"""
    content_type: str
    filename: Optional[str]
    content: str


class MimeMessage:
    """
    Read-only view over a parsed message

    Bodies and attachments are decoded once, at construction, so that every
    accessor is safe to call from worker threads.
    """

    def __init__(self, msg: EmailMessage, config: ParserConfig):
        self._msg = msg
        self._config = config
        self._text_bodies: List[str] = []
        self._html_bodies: List[str] = []
        self._attachments: List[Attachment] = []
        self._extract_content()

    def header_raw(self, name: str) -> Optional[str]:
        """
        First raw value stored for a header, or None

        The value is exactly what followed the colon on the wire, with
        folding preserved and no RFC 2047 decoding applied.
        """
        wanted = name.lower()
        for key, value in self._msg.raw_items():
            if key.lower() == wanted:
                return value
        return None

    def headers_raw(self) -> List[Tuple[str, str]]:
        """Every header line in original order, duplicates included"""
        return [(key, value) for key, value in self._msg.raw_items()]

    def addresses(self, role: str) -> Optional[List[Tuple[str, str]]]:
        """
        Parsed (display_name, addr_spec) pairs for an address role

        Groups are flattened into their member mailboxes.

        Returns:
            None if the header is absent or cannot be parsed at all
        """
        try:
            header = self._msg[role]
        except Exception as e:
            logger.debug("Unparsable %s header: %s", role, e)
            return None
        if header is None:
            return None

        addresses = getattr(header, "addresses", None)
        if addresses is None:
            return None
        return [(addr.display_name, addr.addr_spec) for addr in addresses]

    def text_bodies(self) -> List[str]:
        return list(self._text_bodies)

    def html_bodies(self) -> List[str]:
        return list(self._html_bodies)

    def attachments(self) -> List[Attachment]:
        return list(self._attachments)

    @property
    def subject(self) -> Optional[str]:
        return self._header_str("Subject")

    @property
    def message_id(self) -> Optional[str]:
        return self._message_id_str("Message-ID")

    @property
    def content_id(self) -> Optional[str]:
        return self._message_id_str("Content-ID")

    @property
    def mime_version(self) -> Optional[str]:
        return self._header_str("MIME-Version")

    @property
    def thread_name(self) -> Optional[str]:
        """Subject with reply and forward prefixes removed"""
        subject = self.subject
        if subject is None:
            return None
        return THREAD_PREFIX_PATTERN.sub("", subject).strip()

    @property
    def date(self) -> Optional[int]:
        """
        Date header as Unix epoch seconds

        A date without zone information is taken as UTC.
        """
        try:
            header = self._msg["Date"]
        except Exception:
            return None
        dt = getattr(header, "datetime", None)
        if dt is None:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())

    def _header_str(self, name: str) -> Optional[str]:
        try:
            value = self._msg[name]
        except Exception as e:
            logger.debug("Unparsable %s header: %s", name, e)
            return self.header_raw(name)
        if value is None:
            return None
        return str(value).strip()

    def _message_id_str(self, name: str) -> Optional[str]:
        """Identifier header without its surrounding angle brackets"""
        value = self._header_str(name)
        if value and value.startswith("<") and value.endswith(">"):
            return value[1:-1].strip()
        return value

    def _extract_content(self) -> None:
        """
        Sort leaf parts into text bodies, HTML bodies and attachments

        SECURITY STORY: Walking stops after max_mime_parts parts, counting
        containers, so a deeply nested or very wide message cannot stall
        the pipeline.
        """
        part_count = 0
        for part in self._msg.walk():
            part_count += 1
            if part_count > self._config.max_mime_parts:
                logger.warning(
                    "Message exceeds max MIME parts (%d). Truncating remaining parts.",
                    self._config.max_mime_parts,
                )
                break

            if part.is_multipart():
                continue

            content_type = part.get_content_type()
            is_attachment = part.get_content_disposition() == "attachment"

            if content_type == "text/plain" and not is_attachment:
                self._text_bodies.append(self._limit_body(_decode_part_payload(part), "Body text"))
            elif content_type == "text/html" and not is_attachment:
                self._html_bodies.append(self._limit_body(_decode_part_payload(part), "Body HTML"))
            else:
                self._attachments.append(Attachment(
                    content_type=content_type,
                    filename=part.get_filename(),
                    content=_decode_part_payload(part),
                ))

    def _limit_body(self, body: str, body_type: str) -> str:
        if len(body) > self._config.max_body_size:
            logger.warning(
                "%s truncated to %d characters", body_type, self._config.max_body_size
            )
            return body[:self._config.max_body_size]
        return body


class EmailParser:
    """
    Parses message text into MimeMessage objects

    MAINTENANCE WISDOM: Keep parsing separate from normalization. Tests for
    the extraction heuristics can then build a MimeMessage from a literal
    string without going through base64 at all.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

    def parse(self, raw: str) -> MimeMessage:
        """
        Parse decoded message text

        Raises:
            EmailParseFailed: if the MIME parser rejects the text outright
        """
        try:
            msg = email.message_from_string(raw, policy=policy.default)
            return MimeMessage(msg, self.config)
        except Exception as e:
            logger.debug("MIME parser rejected message: %s", e)
            raise EmailParseFailed() from e


def _decode_part_payload(part: Message) -> str:
    """
    Decode MIME part payload to string

    Args:
        part: MIME part

    Returns:
        Decoded string content
    """
    payload = part.get_payload(decode=True)
    if not payload:
        return ""
    return _decode_bytes(payload, part.get_content_charset())


def _decode_bytes(data: bytes, charset: Optional[str]) -> str:
    """
    Decode bytes to string with charset fallback

    SECURITY STORY: We use 'replace' error handling instead of 'strict'
    to prevent parsing failures from malformed input.
    """
    encoding = charset or "utf-8"
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        # Unknown charset, fallback to UTF-8
        return data.decode("utf-8", errors="replace")
