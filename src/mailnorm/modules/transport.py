"""
Transport Decoder
Guards the pipeline entry: base64url text in, UTF-8 message text out
"""

import base64
import binascii

from .errors import Base64DecodeFailed, EmptyInput, NonUtfInput


def url_base64_decode(value: str) -> str:
    """
    Decode a base64url-encoded raw message

    The URL-safe alphabet is mapped onto the standard one before a strict
    decode, so padding must be present.

    Args:
        value: base64url text as delivered by the mail API

    Returns:
        The decoded message text, unchanged

    Raises:
        EmptyInput: value is empty
        Base64DecodeFailed: value is not valid base64
        NonUtfInput: decoded bytes are not valid UTF-8
    """
    if not value:
        raise EmptyInput()

    normalized = value.replace("-", "+").replace("_", "/")
    try:
        data = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeFailed() from e

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NonUtfInput() from e
