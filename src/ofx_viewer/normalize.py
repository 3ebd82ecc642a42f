"""Conversion of structural aggregates into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ofx_viewer.dates import SENTINEL_DATETIME, parse_ofx_datetime
from ofx_viewer.errors import InvalidDateFormatError
from ofx_viewer.models import (
    Balance,
    BankAccount,
    BankTransactionList,
    FinancialInstitution,
    SignonResponse,
    StatementResponse,
    StatementTransactionResponse,
    Status,
    Transaction,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from datetime import datetime

    from ofx_viewer.diagnostics import Diagnostics
    from ofx_viewer.schema import (
        BalanceAggregate,
        BankAccountAggregate,
        BankTransactionListAggregate,
        FinancialInstitutionAggregate,
        SignonResponseAggregate,
        StatementResponseAggregate,
        StatementTransactionResponseAggregate,
        StatusAggregate,
        TransactionAggregate,
    )


def decode_timestamp(value: str, diagnostics: Diagnostics, field: str) -> datetime:
    """Decode ``value``, substituting ``SENTINEL_DATETIME`` when it is malformed.

    The failure is recorded against ``field`` so callers can tell a substituted
    sentinel from a genuine epoch timestamp.
    """

    try:
        return parse_ofx_datetime(value)
    except InvalidDateFormatError as exc:
        diagnostics.error('normalize', f'Unable to parse date {value!r}: {exc.reason}', field=field)
        return SENTINEL_DATETIME


def normalize_status(node: StatusAggregate) -> Status:
    return Status(code=node.code, severity=node.severity, message=node.message)


def normalize_financial_institution(node: FinancialInstitutionAggregate) -> FinancialInstitution:
    return FinancialInstitution(org=node.org, fid=node.fid)


def normalize_signon(node: SignonResponseAggregate, diagnostics: Diagnostics, path: str = 'signon') -> SignonResponse:
    dtprofup = None
    if node.dtprofup is not None:
        dtprofup = decode_timestamp(node.dtprofup, diagnostics, f'{path}.dtprofup')
    return SignonResponse(
        status=normalize_status(node.status),
        dtserver=decode_timestamp(node.dtserver, diagnostics, f'{path}.dtserver'),
        language=node.language,
        dtprofup=dtprofup,
        fi=normalize_financial_institution(node.fi) if node.fi is not None else None,
    )


def normalize_bank_account(node: BankAccountAggregate) -> BankAccount:
    return BankAccount(bankid=node.bankid, acctid=node.acctid, accttype=node.accttype)


def normalize_transaction(node: TransactionAggregate, diagnostics: Diagnostics, path: str) -> Transaction:
    return Transaction(
        trntype=node.trntype,
        dtposted=decode_timestamp(node.dtposted, diagnostics, f'{path}.dtposted'),
        trnamt=node.trnamt,
        fitid=node.fitid,
        name=node.name,
        memo=node.memo,
    )


def normalize_transaction_list(
    node: BankTransactionListAggregate,
    diagnostics: Diagnostics,
    path: str,
) -> BankTransactionList:
    return BankTransactionList(
        dtstart=decode_timestamp(node.dtstart, diagnostics, f'{path}.dtstart'),
        dtend=decode_timestamp(node.dtend, diagnostics, f'{path}.dtend'),
        transactions=tuple(
            normalize_transaction(item, diagnostics, f'{path}.transactions[{index}]')
            for index, item in enumerate(node.stmttrn)
        ),
    )


def normalize_balance(node: BalanceAggregate, diagnostics: Diagnostics, path: str) -> Balance:
    return Balance(balamt=node.balamt, dtasof=decode_timestamp(node.dtasof, diagnostics, f'{path}.dtasof'))


def normalize_statement(node: StatementResponseAggregate, diagnostics: Diagnostics, path: str) -> StatementResponse:
    banktranlist = ledgerbal = availbal = None
    if node.banktranlist is not None:
        banktranlist = normalize_transaction_list(node.banktranlist, diagnostics, f'{path}.banktranlist')
    if node.ledgerbal is not None:
        ledgerbal = normalize_balance(node.ledgerbal, diagnostics, f'{path}.ledgerbal')
    if node.availbal is not None:
        availbal = normalize_balance(node.availbal, diagnostics, f'{path}.availbal')
    return StatementResponse(
        curdef=node.curdef,
        bankacctfrom=normalize_bank_account(node.bankacctfrom),
        banktranlist=banktranlist,
        ledgerbal=ledgerbal,
        availbal=availbal,
    )


def normalize_statement_transaction(
    node: StatementTransactionResponseAggregate,
    diagnostics: Diagnostics,
    path: str,
) -> StatementTransactionResponse:
    return StatementTransactionResponse(
        trnuid=node.trnuid,
        status=normalize_status(node.status),
        stmtrs=normalize_statement(node.stmtrs, diagnostics, f'{path}.stmtrs'),
    )
