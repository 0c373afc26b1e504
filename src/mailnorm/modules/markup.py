"""
Structured Markup Extractor
Pulls schema.org JSON-LD payloads out of HTML bodies

Malformed markup is common in the wild and must never abort decoding of the
email as a whole, so every script is handled on its own and failures are
dropped after a debug log.
"""

import json
import logging
from concurrent.futures import Executor
from typing import Any, List, Optional, Type, TypeVar

from bs4 import BeautifulSoup, NavigableString
from pydantic import BaseModel, ValidationError

from ..utils.parallel import ordered_filter_map


logger = logging.getLogger(__name__)

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'

M = TypeVar("M", bound=BaseModel)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def _serialize(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def parse_json_ld_payload(payload: str) -> List[str]:
    """
    Split one script payload into candidate JSON strings

    A top-level array yields one candidate per element; any other JSON value
    yields exactly one. Invalid JSON, including the NaN and Infinity
    literals Python would otherwise accept, yields nothing.
    """
    try:
        value = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        logger.debug("Skipping invalid JSON-LD script: %s", e)
        return []

    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return [_serialize(value)]


def parse_json_lds(html: str) -> List[str]:
    """
    Every JSON-LD candidate in an HTML document, in document order

    Only the first text node of each script is considered.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
        scripts = soup.select(JSON_LD_SELECTOR)
    except Exception as e:
        logger.debug("Could not parse HTML for JSON-LD: %s", e)
        return []

    results: List[str] = []
    for script in scripts:
        first_text = next(
            (child for child in script.contents if isinstance(child, NavigableString)),
            None,
        )
        if first_text is None:
            continue
        results.extend(parse_json_ld_payload(str(first_text).strip()))
    return results


def parse_typed(markup: str, model: Type[M]) -> Optional[M]:
    """Validate one candidate against a schema model, None if it does not fit"""
    try:
        return model.model_validate_json(markup)
    except ValidationError:
        return None


def extract_typed(
    markups: List[str],
    model: Type[M],
    executor: Optional[Executor] = None,
) -> List[M]:
    """Candidates that deserialize cleanly as ``model``, order preserved"""
    return ordered_filter_map(lambda markup: parse_typed(markup, model), markups, executor)
