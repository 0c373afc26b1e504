"""
Email Data Model
Contains the records produced by the normalization pipeline

Every record is built once per decode call and never mutated afterwards,
so the dataclasses are frozen. Typed schema.org records live in
``schemaorg`` because they are validated with pydantic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from .schemaorg import EventReservation, FlightReservation, Organization


@dataclass(frozen=True)
class EmailAddress:
    """A parsed mailbox; never constructed without an address"""
    name: Optional[str]
    address: str


@dataclass(frozen=True)
class EmailAddressWithText:
    """
    First address of a required role (from/to) together with the verbatim
    header text it came from
    """
    name: Optional[str]
    text: str
    address: str


@dataclass(frozen=True)
class Header:
    name: str
    value: str


@dataclass(frozen=True)
class EmailText:
    """
    A decoded body and its reply-only excerpt

    ``visible`` is None when no quote boundary was found, which means the
    whole ``text`` is visible.
    """
    text: str
    visible: Optional[str] = None


class CalendarEventStatus(Enum):
    TENTATIVE = "TENTATIVE"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class CalendarEvent:
    """
    A VEVENT component from a text/calendar attachment

    All instants are Unix epoch milliseconds.
    """
    uid: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    organizer: Optional[str] = None
    url: Optional[str] = None
    status: Optional[CalendarEventStatus] = None
    timestamp: Optional[int] = None
    last_modified: Optional[int] = None
    created: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None


@dataclass(frozen=True)
class MicrodataItem:
    """An ``itemscope`` element with its properties and nested scopes"""
    item_type: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, "MicrodataItem"] = field(default_factory=dict)


@dataclass(frozen=True)
class UnsubscribePost:
    url: str
    body: str


@dataclass(frozen=True)
class UnsubscribeEmail:
    email: str
    headers: List[Header] = field(default_factory=list)


@dataclass(frozen=True)
class Unsubscribe:
    """
    Unsubscribe affordances from List-Unsubscribe(-Post)

    ``get`` and ``post`` are mutually exclusive; ``email`` is independent.
    """
    get: Optional[str] = None
    post: Optional[UnsubscribePost] = None
    email: Optional[UnsubscribeEmail] = None


@dataclass(frozen=True)
class Email:
    """Container for a fully normalized email"""
    from_: EmailAddressWithText
    from_addresses: List[EmailAddress]

    to: EmailAddressWithText
    to_addresses: List[EmailAddress]

    cc_addresses: List[EmailAddress]
    bcc_addresses: List[EmailAddress]

    subject: Optional[str]
    # Unix epoch in seconds
    date: Optional[int]
    content_id: Optional[str]
    message_id: Optional[str]
    thread_name: Optional[str]
    mime_version: Optional[str]

    headers: List[Header]

    text_bodies: List[EmailText]
    html_bodies: List[EmailText]

    markups: List[str]
    organizations: List[Organization]
    flight_reservations: List[FlightReservation]
    event_reservations: List[EventReservation]

    calendar_events: List[CalendarEvent]
    microdata: List[MicrodataItem]
    unsubscribe: Unsubscribe


@dataclass(frozen=True)
class GmailMessage:
    """A successful batch section: message metadata plus the decoded email"""
    id: str
    thread_id: str
    label_ids: List[str]
    snippet: EmailText
    size_estimate: int
    history_id: str
    internal_date: str
    data: Email


@dataclass(frozen=True)
class GmailErrorItem:
    message: str
    domain: str
    reason: str


@dataclass(frozen=True)
class GmailError:
    code: int
    message: str
    status: str
    errors: List[GmailErrorItem]


@dataclass(frozen=True)
class BatchSuccess:
    message: GmailMessage


@dataclass(frozen=True)
class BatchError:
    error: GmailError


BatchResponse = Union[BatchSuccess, BatchError]


@dataclass(frozen=True)
class BatchSection:
    batch_name: str
    response: BatchResponse
