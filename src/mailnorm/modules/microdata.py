"""
Microdata Extractor
Rebuilds itemscope/itemprop/itemtype trees from an HTML body

The output tree is freshly allocated from a read-only DOM walk, parent owns
child, so it cannot contain cycles.
"""

import logging
from typing import Dict, List

from bs4 import BeautifulSoup, Tag

from .email_data import MicrodataItem


logger = logging.getLogger(__name__)


def _is_scope(tag: Tag) -> bool:
    return tag.has_attr("itemscope")


def _property_value(element: Tag) -> str:
    """content attribute, else href attribute, else the trimmed text"""
    content = element.get("content")
    if content is not None:
        return content
    href = element.get("href")
    if href is not None:
        return href
    return "".join(element.strings).strip()


def _collect(
    scope: Tag,
    properties: Dict[str, str],
    children: Dict[str, MicrodataItem],
) -> None:
    for child in scope.children:
        if not isinstance(child, Tag):
            continue

        if child.has_attr("itemprop"):
            name = child["itemprop"]
            if _is_scope(child):
                children[name] = extract_item(child)
                continue
            properties[name] = _property_value(child)

        # a nested scope without itemprop is not part of this item
        if _is_scope(child):
            continue
        _collect(child, properties, children)


def extract_item(element: Tag) -> MicrodataItem:
    """
    Build the item for one itemscope element

    Properties and nested scopes are keyed by itemprop name; a repeated
    name keeps the last value seen in document order.
    """
    properties: Dict[str, str] = {}
    children: Dict[str, MicrodataItem] = {}
    _collect(element, properties, children)
    return MicrodataItem(
        item_type=element.get("itemtype"),
        properties=properties,
        children=children,
    )


def parse_microdata(html: str) -> List[MicrodataItem]:
    """Every top-level microdata item (itemscope with no itemscope ancestor)"""
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:
        logger.debug("Could not parse HTML for microdata: %s", e)
        return []

    return [
        extract_item(scope)
        for scope in soup.find_all(_is_scope)
        if scope.find_parent(_is_scope) is None
    ]
