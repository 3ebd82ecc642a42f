"""Decoder for OFX timestamps carrying a bracketed timezone suffix.

OFX writes ``20250604000000[-3:BRT]``: fourteen ``YYYYMMDDHHMMSS`` digits, then a
bracketed pair of a signed hour offset and an informal zone label. The label is
ignored; the offset becomes a fixed ``datetime.timezone``.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from ofx_viewer.errors import InvalidDateFormatError

SENTINEL_DATETIME: datetime = datetime(1970, 1, 1, tzinfo=UTC)
"""Placeholder substituted for timestamps that fail to decode."""

DATETIME_FORMAT = '%Y%m%d%H%M%S%z'
_HOUR_OFFSET = re.compile(r'[+-]?\d+')
_TIMESTAMP_DIGITS = re.compile(r'[0-9]{14}')


def parse_ofx_datetime(value: str) -> datetime:
    """Return the aware ``datetime`` encoded by an OFX ``value``.

    Raises:
        InvalidDateFormatError: if the bracket is missing, the hour offset is not
            an integer, or the digits do not form a valid timestamp.
    """

    bracket = value.find('[')
    if bracket == -1:
        raise InvalidDateFormatError(value, f'no timezone bracket in {value!r}')

    digits = value[:bracket]
    payload = value[bracket + 1 :]
    if payload.endswith(']'):
        payload = payload[:-1]

    offset_text = payload.split(':', 1)[0].strip()
    if not _HOUR_OFFSET.fullmatch(offset_text):
        raise InvalidDateFormatError(value, f'Unable to parse hour offset: {offset_text!r}')
    hours = int(offset_text)

    if not _TIMESTAMP_DIGITS.fullmatch(digits):
        raise InvalidDateFormatError(value, f'Unable to parse processed date: expected 14 digits, got {digits!r}')

    rendered = f'{digits}{hours:+03d}00'
    try:
        return datetime.strptime(rendered, DATETIME_FORMAT)
    except ValueError as exc:
        raise InvalidDateFormatError(value, f'Unable to parse processed date: {exc}') from exc
