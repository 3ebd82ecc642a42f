"""Top-level OFX 1.02 decode pipeline."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ofx_viewer.diagnostics import Diagnostics
from ofx_viewer.errors import UnsupportedFeatureError
from ofx_viewer.header import DEFAULT_POLICY, VersionPolicy, parse_header, split_document
from ofx_viewer.models import OfxDocument
from ofx_viewer.normalize import normalize_signon, normalize_statement_transaction
from ofx_viewer.schema import decode_body

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from ofx_viewer.models import Header
    from ofx_viewer.schema import OfxBodyAggregate

LOGGER = logging.getLogger(__name__)

_HEADER_HINT = re.compile(rb'^\s*(ENCODING|CHARSET)\s*:\s*(\S+)', re.IGNORECASE | re.MULTILINE)
CHARSET_CODECS: dict[str, str] = {
    '1252': 'cp1252',
    'ISO-8859-1': 'latin-1',
    '8859-1': 'latin-1',
    'UTF-8': 'utf-8',
}
"""Python codecs for the ``CHARSET``/``ENCODING`` header values seen in the wild."""


def assemble_document(header: Header, body: OfxBodyAggregate, diagnostics: Diagnostics) -> OfxDocument:
    """Combine the decoded header and body into an ``OfxDocument``."""

    return OfxDocument(
        header=header,
        signon=normalize_signon(body.signonmsgsrsv1.sonrs, diagnostics),
        bank_msgs=tuple(
            normalize_statement_transaction(response, diagnostics, f'bank_msgs[{index}]')
            for index, response in enumerate(body.bankmsgsrsv1.stmttrnrs)
        ),
    )


def decode(
    text: str,
    policy: VersionPolicy = DEFAULT_POLICY,
    *,
    diagnostics: Diagnostics | None = None,
) -> OfxDocument:
    """Decode a complete OFX 1.02 document.

    Args:
        text: Full document text, header included.
        policy: Accepted ``OFXHEADER``/``VERSION`` values.
        diagnostics: Optional collector receiving tolerated problems such as
            unknown header keys or timestamps replaced by the sentinel.

    Raises:
        InvalidContentError: if the text has no header region.
        InvalidVersionError: if the header declares an unsupported version.
        MissingHeaderError: if ``VERSION`` is absent.
        XmlDecodeError: if the body does not match the statement schema.
        UnsupportedFeatureError: if the body only carries non-bank message sets.
    """

    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    LOGGER.debug('Decoding OFX content, %d characters', len(text))
    header_text, body_text = split_document(text)
    header = parse_header(header_text, policy, diagnostics)
    body = decode_body(body_text, diagnostics)
    return assemble_document(header, body, diagnostics)


def detect_encoding(raw: bytes, fallback: str = 'cp1252') -> str:
    """Pick a codec for ``raw`` from its ``ENCODING``/``CHARSET`` header lines."""

    hints = {
        key.decode('latin-1').upper(): value.decode('latin-1').upper() for key, value in _HEADER_HINT.findall(raw)
    }
    if hints.get('ENCODING') == 'UTF-8':
        return 'utf-8'
    return CHARSET_CODECS.get(hints.get('CHARSET', ''), fallback)


def decode_bytes(
    raw: bytes,
    policy: VersionPolicy = DEFAULT_POLICY,
    *,
    diagnostics: Diagnostics | None = None,
    fallback_encoding: str = 'cp1252',
) -> OfxDocument:
    """Decode raw file bytes, choosing the text codec from the header.

    Raises:
        UnsupportedFeatureError: if the chosen codec is unknown to Python.
    """

    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    codec = detect_encoding(raw, fallback_encoding)
    try:
        text = raw.decode(codec)
    except LookupError as exc:
        raise UnsupportedFeatureError(f'text encoding {codec!r}') from exc
    except UnicodeDecodeError as exc:
        diagnostics.warning('header', f'Content is not valid {codec} ({exc.reason}); undecodable bytes replaced.')
        text = raw.decode(codec, errors='replace')
    return decode(text, policy, diagnostics=diagnostics)
