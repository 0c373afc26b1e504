"""
Address & Header Normalizer
Projects parsed address lists and raw header lines into normalized records
"""

from concurrent.futures import Executor
from typing import List, Optional, Tuple, Type

from .email_data import EmailAddress, EmailAddressWithText, Header
from .email_parser import MimeMessage
from .errors import ParserError
from ..utils.parallel import ordered_filter_map


def parse_addr(pair: Tuple[Optional[str], Optional[str]]) -> Optional[EmailAddress]:
    """
    Build an EmailAddress from a (display_name, addr_spec) pair

    Returns:
        None when the pair carries no address; the name is optional
    """
    name, address = pair
    if not address:
        return None
    return EmailAddress(name=name or None, address=address)


def parse_addrs(
    pairs: List[Tuple[Optional[str], Optional[str]]],
    executor: Optional[Executor] = None,
) -> List[EmailAddress]:
    """Keep every pair that has an address, in order"""
    return ordered_filter_map(parse_addr, pairs, executor)


def required_address(
    message: MimeMessage,
    role: str,
    error_cls: Type[ParserError],
    executor: Optional[Executor] = None,
) -> Tuple[EmailAddressWithText, List[EmailAddress]]:
    """
    Resolve a role that must name exactly one primary address (from/to)

    Raises:
        error_cls: if the raw header is missing, unparsable, or yields no
            address at all
    """
    raw_text = message.header_raw(role)
    if raw_text is None:
        raise error_cls()

    pairs = message.addresses(role)
    if pairs is None:
        raise error_cls()

    addresses = parse_addrs(pairs, executor)
    if not addresses:
        raise error_cls()

    first = addresses[0]
    return (
        EmailAddressWithText(name=first.name, text=raw_text, address=first.address),
        addresses,
    )


def optional_addresses(
    message: MimeMessage,
    role: str,
    executor: Optional[Executor] = None,
) -> List[EmailAddress]:
    """Addresses for cc/bcc; an absent role is simply empty"""
    pairs = message.addresses(role)
    if not pairs:
        return []
    return parse_addrs(pairs, executor)


def parse_headers(message: MimeMessage) -> List[Header]:
    """One Header per raw header line, order and duplicates preserved"""
    return [Header(name=name, value=value) for name, value in message.headers_raw()]
