"""Error taxonomy raised by the OFX decode pipeline."""

from __future__ import annotations


class OfxError(Exception):
    """Base class for every error raised while reading or decoding an OFX document."""


class InvalidContentError(OfxError):
    """Raised when the text has no header region in front of the body."""

    def __init__(self, message: str = 'No valid header found') -> None:
        super().__init__(f'Invalid content: {message}')


class InvalidVersionError(OfxError):
    """Raised when ``OFXHEADER`` or ``VERSION`` carries an unsupported value."""

    def __init__(self, value: str) -> None:
        super().__init__(f'Invalid OFX version: {value}')
        self.value = value


class MissingHeaderError(OfxError):
    """Raised when a mandatory header field is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(f'Missing required header: {field}')
        self.field = field


class XmlDecodeError(OfxError):
    """Raised when the body does not match the statement schema.

    The underlying tokenizer or schema error is kept in ``cause``.
    """

    def __init__(self, cause: Exception) -> None:
        super().__init__(f'XML parsing error: {cause}')
        self.cause = cause


class InvalidDateFormatError(OfxError):
    """Raised when an OFX timestamp cannot be decoded."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f'Invalid date format: {reason}')
        self.value = value
        self.reason = reason


class UnsupportedFeatureError(OfxError):
    """Raised for OFX features outside the bank statement message set."""

    def __init__(self, feature: str) -> None:
        super().__init__(f'Unsupported OFX feature: {feature}')
        self.feature = feature


class OfxIOError(OfxError):
    """Raised when a statement source cannot be read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f'IO error: {source}: {reason}')
        self.source = source
