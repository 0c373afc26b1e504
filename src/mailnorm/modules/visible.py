"""
Quote-Stripping Classifier
Infers the reply-only ("visible") part of a text or HTML body

Both heuristics are pure functions of one body string. A None result means
no quote boundary was found and the whole body is visible.
"""

import html
import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .email_data import EmailText


logger = logging.getLogger(__name__)

# "On Mon, 3 Jun 2024 at 10:15" / "On Tue, Jun 4, 2024 at 9:02"
REPLY_SEPARATOR_PATTERN = re.compile(
    r"On\s\w{3},\s(?:\d{1,2}|\w{3})\s(?:\d{1,2}|\w{3}),?\s\d{4}\sat\s\d{1,2}:\d{2}"
)

GMAIL_QUOTE_MARKER = "gmail_quote_container"
GMAIL_QUOTE_SELECTOR = ".gmail_quote_container"


def parse_visible_text(body: str) -> Optional[str]:
    """
    Text written above the first reply-quote introduction

    Args:
        body: Entity-decoded plain text body

    Returns:
        The stripped text before the first "On <day>, ... at HH:MM" line,
        or None if there is no such line
    """
    match = REPLY_SEPARATOR_PATTERN.search(body)
    if match is None:
        return None
    return body[:match.start()].strip()


def _tag_pattern(name: str) -> re.Pattern:
    """Opening or closing tag for one element name, quoted attributes allowed"""
    return re.compile(
        r"<(/?)%s(?=[\s/>])(?:\"[^\"]*\"|'[^']*'|[^'\">])*>" % re.escape(name),
        re.IGNORECASE,
    )


def _line_offsets(text: str) -> List[int]:
    return [0] + [match.end() for match in re.finditer("\n", text)]


def _element_span(body: str, offsets: List[int], element: Tag) -> Tuple[int, int]:
    """
    Source range of an element in the original body

    The start comes from the parser's recorded position. The end is the
    matching close tag of the same name; an element never closed runs to
    the end of the body, as the parser itself treats it.
    """
    if element.sourceline is None or element.sourcepos is None:
        raise ValueError(f"no source position for <{element.name}>")

    start = offsets[element.sourceline - 1] + element.sourcepos
    pattern = _tag_pattern(element.name)
    opening = pattern.match(body, start)
    if opening is None or opening.group(1):
        raise ValueError(f"<{element.name}> not found at offset {start}")

    if element.can_be_empty_element or opening.group(0).endswith("/>"):
        return start, opening.end()

    depth = 1
    for match in pattern.finditer(body, opening.end()):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return start, match.end()
        elif not match.group(0).endswith("/>"):
            depth += 1
    return start, len(body)


def parse_visible_html(body: str) -> Optional[str]:
    """
    HTML body with webmail quote containers removed

    Only the source ranges of matching elements are cut out; every other
    character of the body is returned as written, entities and unclosed
    tags included.

    Returns:
        The remaining markup, or None when the body has no quote container
        or could not be rewritten
    """
    if GMAIL_QUOTE_MARKER not in body:
        return None

    try:
        soup = BeautifulSoup(body, "html.parser")
        offsets = _line_offsets(body)
        spans = sorted(
            _element_span(body, offsets, element)
            for element in soup.select(GMAIL_QUOTE_SELECTOR)
        )

        pieces: List[str] = []
        position = 0
        for start, end in spans:
            # nested containers fall inside an earlier span
            if start < position:
                continue
            pieces.append(body[position:start])
            position = end
        pieces.append(body[position:])

        output = "".join(pieces)
        output.encode("utf-8")
    except Exception as e:
        logger.debug("Could not strip quoted HTML: %s", e)
        return None

    return output


def parse_text(body: str) -> EmailText:
    """Decode HTML entities in a text body and find its visible part"""
    text = html.unescape(body)
    return EmailText(text=text, visible=parse_visible_text(text))


def parse_html(body: str) -> EmailText:
    return EmailText(text=body, visible=parse_visible_html(body))


def escape_text(text: str) -> str:
    """HTML-entity-encode a plain string (&, < and >)"""
    return html.escape(text, quote=False)
