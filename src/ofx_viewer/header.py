"""Header splitting and decoding for OFX 1.02 files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ofx_viewer.diagnostics import Diagnostics
from ofx_viewer.errors import InvalidContentError, InvalidVersionError, MissingHeaderError
from ofx_viewer.models import Header

LOGGER = logging.getLogger(__name__)

BODY_START_PATTERN = re.compile(r'<\?xml.*\?>|<OFX>')
"""First XML prolog or root ``<OFX>`` tag; everything before it is header text."""

OPTIONAL_FIELDS: dict[str, str] = {
    'SECURITY': 'security',
    'ENCODING': 'encoding',
    'CHARSET': 'charset',
    'COMPRESSION': 'compression',
    'OLDFILEUID': 'old_file_uid',
    'NEWFILEUID': 'new_file_uid',
}
"""Header keys captured verbatim, mapped to ``Header`` attribute names."""


@dataclass(frozen=True, slots=True)
class VersionPolicy:
    """Header values a decode accepts."""

    header_format: str = '100'
    version: str = '102'


DEFAULT_POLICY = VersionPolicy()


def find_body_offset(text: str) -> int:
    """Return the offset where the body region of ``text`` starts."""

    match = BODY_START_PATTERN.search(text)
    offset = match.start() if match else 0
    if offset == 0:
        raise InvalidContentError('No valid header found')
    return offset


def split_document(text: str) -> tuple[str, str]:
    """Split ``text`` into ``(header, body)`` regions."""

    offset = find_body_offset(text)
    return text[:offset], text[offset:]


def parse_header(
    header_text: str,
    policy: VersionPolicy = DEFAULT_POLICY,
    diagnostics: Diagnostics | None = None,
) -> Header:
    """Decode the ``KEY:VALUE`` lines of an OFX header region."""

    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    version: str | None = None
    seen_marker = False
    captured: dict[str, str] = {}

    for line in header_text.splitlines():
        if not line.strip():
            continue
        parts = line.split(':', 1)
        if len(parts) != 2:
            diagnostics.warning('header', f'Invalid header line format: {line.strip()}. Skipping line.')
            continue

        key = parts[0].strip().upper()
        value = parts[1].strip()
        if key == 'OFXHEADER':
            if value != policy.header_format:
                raise InvalidVersionError(value)
            seen_marker = True
            LOGGER.debug('OFXHEADER validated: %s', value)
        elif key == 'VERSION':
            if value != policy.version:
                raise InvalidVersionError(value)
            version = value
            LOGGER.debug('VERSION set to: %s', value)
        elif key in OPTIONAL_FIELDS:
            captured[OPTIONAL_FIELDS[key]] = value
            LOGGER.debug('%s set to: %s', key, value)
        else:
            diagnostics.info('header', f'Unknown header key: {key}. Value: {value}. Ignoring.', field=key)

    if version is None:
        raise MissingHeaderError('VERSION')
    if not seen_marker:
        diagnostics.warning('header', 'OFXHEADER line not found; assuming the supported header format.')
    return Header(version=version, **captured)
