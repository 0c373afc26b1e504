"""
mailnorm
Normalizes raw email messages and mail API batch replies into structured records
"""

from .modules.batch import BatchParser, parse_batch_response
from .modules.email_assembler import EmailAssembler, parse_email
from .modules.email_data import (
    BatchError,
    BatchSection,
    BatchSuccess,
    CalendarEvent,
    CalendarEventStatus,
    Email,
    EmailAddress,
    EmailAddressWithText,
    EmailText,
    GmailError,
    GmailErrorItem,
    GmailMessage,
    Header,
    MicrodataItem,
    Unsubscribe,
    UnsubscribeEmail,
    UnsubscribePost,
)
from .modules.errors import (
    Base64DecodeFailed,
    EmailParseFailed,
    EmptyInput,
    NoFromHeader,
    NonUtfInput,
    NoToHeader,
    ParserError,
)
from .modules.visible import escape_text, parse_visible_html, parse_visible_text

__version__ = "0.1.0"
