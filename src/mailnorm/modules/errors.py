"""
Parser Errors
The fatal outcomes of a single-message decode

Only structural problems are fatal: the input must decode to text, the text
must parse as a message, and the message must name a sender and a recipient.
Every enrichment step (visible text, markup, microdata, calendar, unsubscribe)
degrades to an empty result instead of raising.
"""


class ParserError(Exception):
    """Base class for all fatal decode errors"""

    default_message = "Failed to parse email"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class EmptyInput(ParserError):
    default_message = "Input string is empty"


class Base64DecodeFailed(ParserError):
    default_message = "Failed to decode base64 input"


class NonUtfInput(ParserError):
    default_message = "Decoded data is not a UTF8 string"


class EmailParseFailed(ParserError):
    default_message = "Failed to parse email"


class NoFromHeader(ParserError):
    default_message = "Email doesn't have a from header"


class NoToHeader(ParserError):
    default_message = "Email doesn't have a to header"
