"""
Batch Response Parser
Splits a raw multipart batch reply into sections and parses each one

SECURITY STORY: Batch replies arrive from the network and may be truncated
or interleaved with proxy noise. Parsing is best-effort per section: a
section that cannot be understood is dropped and never affects its
siblings, and the parser as a whole never raises.

Each section is tried, in order, as:
1. a message envelope whose ``raw`` field decodes as an email
2. an API error envelope, bare or wrapped in ``{"error": {...}}``
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .email_assembler import EmailAssembler
from .email_data import (
    BatchError,
    BatchResponse,
    BatchSection,
    BatchSuccess,
    GmailError,
    GmailErrorItem,
    GmailMessage,
)
from .errors import ParserError
from .visible import parse_text
from ..utils.config import ParserConfig
from ..utils.parallel import ordered_filter_map
from ..utils.sanitization import sanitize_for_logging


logger = logging.getLogger(__name__)

SECTION_DELIMITER = "--"


class GmailMessageIn(BaseModel):
    """Wire shape of a users.messages.get response in ``raw`` format"""

    model_config = ConfigDict(strict=True, populate_by_name=True)

    id: str
    thread_id: str = Field(alias="threadId")
    label_ids: List[str] = Field(alias="labelIds")
    snippet: str
    size_estimate: int = Field(alias="sizeEstimate", ge=0)
    raw: str
    history_id: str = Field(alias="historyId")
    internal_date: str = Field(alias="internalDate")


class GmailErrorItemIn(BaseModel):
    model_config = ConfigDict(strict=True)

    message: str
    domain: str
    reason: str


class GmailErrorIn(BaseModel):
    """Wire shape of an API error"""

    model_config = ConfigDict(strict=True)

    code: int = Field(ge=0)
    message: str
    status: str
    errors: List[GmailErrorItemIn]

    @model_validator(mode="before")
    @classmethod
    def _unwrap_envelope(cls, data: Any) -> Any:
        if isinstance(data, dict) and set(data) == {"error"} and isinstance(data["error"], dict):
            return data["error"]
        return data


class BatchParser:
    """Parses batch replies; sections are independent units of work"""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.assembler = EmailAssembler(self.config)

    def parse(self, body: str) -> List[BatchSection]:
        """
        Every section that parses as a message or an error, in order

        A blob with no usable section yields an empty list.
        """
        sections = body.split(SECTION_DELIMITER)
        if self.config.max_workers <= 1:
            return ordered_filter_map(self.parse_section, sections)
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            return ordered_filter_map(self.parse_section, sections, executor)

    def parse_section(self, section: str) -> Optional[BatchSection]:
        lines = section.splitlines()
        if not lines:
            return None
        batch_name = lines[0].strip()

        json_start = section.find("{")
        json_end = section.rfind("}")
        if json_start == -1 or json_end == -1 or json_end < json_start:
            return None
        payload = section[json_start:json_end + 1]

        response = self._parse_success(payload) or self._parse_error(payload)
        if response is None:
            logger.debug(
                "Dropping unparsable batch section %s",
                sanitize_for_logging(batch_name),
            )
            return None

        return BatchSection(batch_name=batch_name, response=response)

    def _parse_success(self, payload: str) -> Optional[BatchResponse]:
        try:
            envelope = GmailMessageIn.model_validate_json(payload)
        except ValidationError:
            return None

        try:
            data = self.assembler.parse_email(envelope.raw)
        except ParserError as e:
            logger.debug(
                "Message %s in batch did not decode: %s",
                sanitize_for_logging(envelope.id),
                e,
            )
            return None

        return BatchSuccess(message=GmailMessage(
            id=envelope.id,
            thread_id=envelope.thread_id,
            label_ids=list(envelope.label_ids),
            snippet=parse_text(envelope.snippet),
            size_estimate=envelope.size_estimate,
            history_id=envelope.history_id,
            internal_date=envelope.internal_date,
            data=data,
        ))

    @staticmethod
    def _parse_error(payload: str) -> Optional[BatchResponse]:
        try:
            envelope = GmailErrorIn.model_validate_json(payload)
        except ValidationError:
            return None

        return BatchError(error=GmailError(
            code=envelope.code,
            message=envelope.message,
            status=envelope.status,
            errors=[
                GmailErrorItem(message=item.message, domain=item.domain, reason=item.reason)
                for item in envelope.errors
            ],
        ))


_default_parser = BatchParser()


def parse_batch_response(body: str) -> List[BatchSection]:
    """Parse a batch reply with the default configuration"""
    return _default_parser.parse(body)
