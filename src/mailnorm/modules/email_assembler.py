"""
Email Assembler
Orchestrates the normalization stages into a single Email record

PATTERN RECOGNITION: This is a Pipeline. Transport decoding and the
sender/recipient checks are structural, so their errors propagate to the
caller. Every later stage is enrichment: it reads only its own input unit
and degrades to an empty result instead of failing the decode.
"""

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, Optional

from .addresses import optional_addresses, parse_headers, required_address
from .calendar_events import parse_calendar_events
from .email_data import Email
from .email_parser import EmailParser, MimeMessage
from .errors import NoFromHeader, NoToHeader
from .markup import extract_typed, parse_json_lds
from .microdata import parse_microdata
from .schemaorg import EventReservation, FlightReservation, Organization
from .transport import url_base64_decode
from .unsubscribe import parse_unsubscribe
from .visible import parse_html, parse_text
from ..utils.config import ParserConfig
from ..utils.parallel import ordered_flat_map, ordered_map
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)


class EmailAssembler:
    """
    Decodes base64url messages into Email records

    MAINTENANCE WISDOM: The assembler holds configuration only. Each call
    gets its own worker pool, so instances can be shared between threads.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.parser = EmailParser(self.config)

    @contextmanager
    def _executor(self) -> Iterator[Optional[Executor]]:
        if self.config.max_workers <= 1:
            yield None
            return
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            yield executor

    def parse_email(self, raw: str) -> Email:
        """
        Decode and normalize one message

        Args:
            raw: base64url-encoded RFC 822 message

        Returns:
            The normalized Email

        Raises:
            EmptyInput, Base64DecodeFailed, NonUtfInput: transport failures
            EmailParseFailed: the MIME parser rejected the text
            NoFromHeader, NoToHeader: a required role is missing or unparsable
        """
        text = url_base64_decode(raw)
        message = self.parser.parse(text)
        with self._executor() as executor:
            return self.assemble(message, executor)

    def assemble(self, message: MimeMessage, executor: Optional[Executor] = None) -> Email:
        """Build the Email record from an already parsed message"""
        from_, from_addresses = required_address(message, "from", NoFromHeader, executor)
        to, to_addresses = required_address(message, "to", NoToHeader, executor)

        html_bodies = message.html_bodies()

        markups = ordered_flat_map(parse_json_lds, html_bodies, executor)

        email = Email(
            from_=from_,
            from_addresses=from_addresses,
            to=to,
            to_addresses=to_addresses,
            cc_addresses=optional_addresses(message, "cc", executor),
            bcc_addresses=optional_addresses(message, "bcc", executor),
            subject=message.subject,
            date=message.date,
            content_id=message.content_id,
            message_id=message.message_id,
            thread_name=message.thread_name,
            mime_version=message.mime_version,
            headers=parse_headers(message),
            text_bodies=ordered_map(parse_text, message.text_bodies(), executor),
            html_bodies=ordered_map(parse_html, html_bodies, executor),
            markups=markups,
            organizations=extract_typed(markups, Organization, executor),
            flight_reservations=extract_typed(markups, FlightReservation, executor),
            event_reservations=extract_typed(markups, EventReservation, executor),
            calendar_events=parse_calendar_events(message.attachments(), executor),
            microdata=ordered_flat_map(parse_microdata, html_bodies, executor),
            unsubscribe=parse_unsubscribe(
                message.header_raw("List-Unsubscribe"),
                message.header_raw("List-Unsubscribe-Post"),
            ),
        )

        logger.debug(
            "Normalized message %s: %d text, %d html, %d markups, %d events",
            sanitize_for_logging(email.message_id or ""),
            len(email.text_bodies),
            len(email.html_bodies),
            len(email.markups),
            len(email.calendar_events),
        )
        return email


_default_assembler = EmailAssembler()


def parse_email(raw: str) -> Email:
    """Decode one base64url message with the default configuration"""
    return _default_assembler.parse_email(raw)
