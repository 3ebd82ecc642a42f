"""Structural decode of the OFX body into XML-shaped aggregate records.

``ofxtools`` turns the SGML/XML tag soup into an ``ElementTree``; the aggregates
below check that tree against the bank statement schema. Values stay as close
to the markup as possible: timestamps remain strings and are handled by
:mod:`ofx_viewer.normalize`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING
from xml.sax.saxutils import unescape

from ofxtools.Parser import ParseError, TreeBuilder

from ofx_viewer.diagnostics import Diagnostics
from ofx_viewer.errors import UnsupportedFeatureError, XmlDecodeError

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from xml.etree.ElementTree import Element

_TAG = re.compile(r'<(/?)([A-Za-z0-9._]+)>')
_PROCESSING_INSTRUCTION = re.compile(r'<\?.*?\?>', re.DOTALL)
_MESSAGE_SET = re.compile(r'[A-Z]+MSGSRSV\d+')
_ENTITIES = {'&quot;': '"', '&apos;': "'"}


class SchemaError(ValueError):
    """Raised when the element tree does not match the statement schema."""


def _children(elem: Element, tag: str) -> list[Element]:
    return elem.findall(tag)


def _child(elem: Element, tag: str) -> Element | None:
    found = _children(elem, tag)
    if len(found) > 1:
        raise SchemaError(f'<{elem.tag}> has {len(found)} <{tag}> elements, expected one')
    return found[0] if found else None


def _required_child(elem: Element, tag: str) -> Element:
    found = _child(elem, tag)
    if found is None:
        raise SchemaError(f'<{elem.tag}> is missing required element <{tag}>')
    return found


def _optional_text(elem: Element, tag: str) -> str | None:
    found = _child(elem, tag)
    if found is None:
        return None
    return unescape((found.text or '').strip(), _ENTITIES)


def _required_text(elem: Element, tag: str) -> str:
    text = _optional_text(elem, tag)
    if text is None:
        raise SchemaError(f'<{elem.tag}> is missing required element <{tag}>')
    return text


def _int_value(elem: Element, tag: str) -> int:
    text = _required_text(elem, tag)
    try:
        return int(text)
    except ValueError as exc:
        raise SchemaError(f'<{tag}> must be an integer, got {text!r}') from exc


def _decimal_value(elem: Element, tag: str) -> Decimal:
    text = _required_text(elem, tag)
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise SchemaError(f'<{tag}> must be a decimal amount, got {text!r}') from exc


@dataclass(frozen=True, slots=True)
class StatusAggregate:
    code: int
    severity: str
    message: str | None

    @classmethod
    def from_element(cls, elem: Element) -> StatusAggregate:
        return cls(
            code=_int_value(elem, 'CODE'),
            severity=_required_text(elem, 'SEVERITY'),
            message=_optional_text(elem, 'MESSAGE'),
        )


@dataclass(frozen=True, slots=True)
class FinancialInstitutionAggregate:
    org: str
    fid: str | None

    @classmethod
    def from_element(cls, elem: Element) -> FinancialInstitutionAggregate:
        return cls(org=_required_text(elem, 'ORG'), fid=_optional_text(elem, 'FID'))


@dataclass(frozen=True, slots=True)
class SignonResponseAggregate:
    status: StatusAggregate
    dtserver: str
    language: str | None
    dtprofup: str | None
    fi: FinancialInstitutionAggregate | None

    @classmethod
    def from_element(cls, elem: Element) -> SignonResponseAggregate:
        fi = _child(elem, 'FI')
        return cls(
            status=StatusAggregate.from_element(_required_child(elem, 'STATUS')),
            dtserver=_required_text(elem, 'DTSERVER'),
            language=_optional_text(elem, 'LANGUAGE'),
            dtprofup=_optional_text(elem, 'DTPROFUP'),
            fi=FinancialInstitutionAggregate.from_element(fi) if fi is not None else None,
        )


@dataclass(frozen=True, slots=True)
class SignonMessagesAggregate:
    sonrs: SignonResponseAggregate

    @classmethod
    def from_element(cls, elem: Element) -> SignonMessagesAggregate:
        return cls(sonrs=SignonResponseAggregate.from_element(_required_child(elem, 'SONRS')))


@dataclass(frozen=True, slots=True)
class BankAccountAggregate:
    bankid: str
    acctid: str
    accttype: str

    @classmethod
    def from_element(cls, elem: Element) -> BankAccountAggregate:
        return cls(
            bankid=_required_text(elem, 'BANKID'),
            acctid=_required_text(elem, 'ACCTID'),
            accttype=_required_text(elem, 'ACCTTYPE'),
        )


@dataclass(frozen=True, slots=True)
class TransactionAggregate:
    trntype: str
    dtposted: str
    trnamt: Decimal
    fitid: str
    name: str | None
    memo: str | None

    @classmethod
    def from_element(cls, elem: Element) -> TransactionAggregate:
        return cls(
            trntype=_required_text(elem, 'TRNTYPE'),
            dtposted=_required_text(elem, 'DTPOSTED'),
            trnamt=_decimal_value(elem, 'TRNAMT'),
            fitid=_required_text(elem, 'FITID'),
            name=_optional_text(elem, 'NAME'),
            memo=_optional_text(elem, 'MEMO'),
        )


@dataclass(frozen=True, slots=True)
class BankTransactionListAggregate:
    dtstart: str
    dtend: str
    stmttrn: tuple[TransactionAggregate, ...]

    @classmethod
    def from_element(cls, elem: Element) -> BankTransactionListAggregate:
        return cls(
            dtstart=_required_text(elem, 'DTSTART'),
            dtend=_required_text(elem, 'DTEND'),
            stmttrn=tuple(TransactionAggregate.from_element(item) for item in _children(elem, 'STMTTRN')),
        )


@dataclass(frozen=True, slots=True)
class BalanceAggregate:
    balamt: Decimal
    dtasof: str

    @classmethod
    def from_element(cls, elem: Element) -> BalanceAggregate:
        return cls(balamt=_decimal_value(elem, 'BALAMT'), dtasof=_required_text(elem, 'DTASOF'))


@dataclass(frozen=True, slots=True)
class StatementResponseAggregate:
    curdef: str
    bankacctfrom: BankAccountAggregate
    banktranlist: BankTransactionListAggregate | None
    ledgerbal: BalanceAggregate | None
    availbal: BalanceAggregate | None

    @classmethod
    def from_element(cls, elem: Element) -> StatementResponseAggregate:
        tranlist = _child(elem, 'BANKTRANLIST')
        ledgerbal = _child(elem, 'LEDGERBAL')
        availbal = _child(elem, 'AVAILBAL')
        return cls(
            curdef=_required_text(elem, 'CURDEF'),
            bankacctfrom=BankAccountAggregate.from_element(_required_child(elem, 'BANKACCTFROM')),
            banktranlist=BankTransactionListAggregate.from_element(tranlist) if tranlist is not None else None,
            ledgerbal=BalanceAggregate.from_element(ledgerbal) if ledgerbal is not None else None,
            availbal=BalanceAggregate.from_element(availbal) if availbal is not None else None,
        )


@dataclass(frozen=True, slots=True)
class StatementTransactionResponseAggregate:
    trnuid: str
    status: StatusAggregate
    stmtrs: StatementResponseAggregate

    @classmethod
    def from_element(cls, elem: Element) -> StatementTransactionResponseAggregate:
        return cls(
            trnuid=_required_text(elem, 'TRNUID'),
            status=StatusAggregate.from_element(_required_child(elem, 'STATUS')),
            stmtrs=StatementResponseAggregate.from_element(_required_child(elem, 'STMTRS')),
        )


@dataclass(frozen=True, slots=True)
class BankMessagesAggregate:
    stmttrnrs: tuple[StatementTransactionResponseAggregate, ...]

    @classmethod
    def from_element(cls, elem: Element) -> BankMessagesAggregate:
        responses = _children(elem, 'STMTTRNRS')
        if not responses:
            raise SchemaError('<BANKMSGSRSV1> must contain at least one <STMTTRNRS>')
        return cls(stmttrnrs=tuple(StatementTransactionResponseAggregate.from_element(item) for item in responses))


@dataclass(frozen=True, slots=True)
class OfxBodyAggregate:
    signonmsgsrsv1: SignonMessagesAggregate
    bankmsgsrsv1: BankMessagesAggregate

    @classmethod
    def from_element(cls, elem: Element) -> OfxBodyAggregate:
        if elem.tag != 'OFX':
            raise SchemaError(f'root element must be <OFX>, got <{elem.tag}>')
        return cls(
            signonmsgsrsv1=SignonMessagesAggregate.from_element(_required_child(elem, 'SIGNONMSGSRSV1')),
            bankmsgsrsv1=BankMessagesAggregate.from_element(_required_child(elem, 'BANKMSGSRSV1')),
        )


def _normalize_tags(body: str) -> str:
    """Drop processing instructions and upper-case tag names so element matching ignores case."""

    body = _PROCESSING_INSTRUCTION.sub('', body).strip()
    return _TAG.sub(lambda match: f'<{match.group(1)}{match.group(2).upper()}>', body)


class NestingTreeBuilder(TreeBuilder):
    """``TreeBuilder`` that insists every closing tag matches the innermost open element."""

    def __init__(self) -> None:
        super().__init__()
        self.open_tags: list[str] = []

    def start(self, tag: str, attrs: dict[str, str]) -> Element:
        self.open_tags.append(tag)
        return super().start(tag, attrs)

    def end(self, tag: str) -> Element:
        if not self.open_tags:
            raise SchemaError(f'closing tag </{tag}> without a matching opening tag')
        expected = self.open_tags.pop()
        if tag != expected:
            raise SchemaError(f'closing tag </{tag}> does not match open element <{expected}>')
        return super().end(tag)


def build_tree(body: str) -> Element:
    """Tokenize ``body`` into an element tree rooted at ``<OFX>``.

    Raises:
        SchemaError: if a closing tag does not match its element or elements are left open.
    """

    builder = NestingTreeBuilder()
    builder.feed(_normalize_tags(body))
    if builder.open_tags:
        raise SchemaError(f'unclosed elements: {", ".join(builder.open_tags)}')
    root = builder.close()
    if root is None:
        raise SchemaError('body contains no elements')
    return root


def _check_message_sets(root: Element, diagnostics: Diagnostics) -> None:
    others = [
        child.tag
        for child in root
        if _MESSAGE_SET.fullmatch(child.tag) and child.tag not in {'SIGNONMSGSRSV1', 'BANKMSGSRSV1'}
    ]
    if root.find('BANKMSGSRSV1') is None and others:
        raise UnsupportedFeatureError(f'message set {others[0]}')
    for tag in others:
        diagnostics.warning('body', f'Ignoring unsupported message set <{tag}>.', field=tag)


def decode_body(body: str, diagnostics: Diagnostics | None = None) -> OfxBodyAggregate:
    """Decode the body region into an ``OfxBodyAggregate``.

    Raises:
        XmlDecodeError: if the markup is malformed or does not match the schema.
        UnsupportedFeatureError: if the body only holds non-bank message sets.
    """

    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    try:
        root = build_tree(body)
        _check_message_sets(root, diagnostics)
        aggregate = OfxBodyAggregate.from_element(root)
    except (ParseError, SchemaError) as exc:
        raise XmlDecodeError(exc) from exc
    diagnostics.debug(
        'body',
        f'Decoded body with {len(aggregate.bankmsgsrsv1.stmttrnrs)} statement transaction responses.',
    )
    return aggregate
