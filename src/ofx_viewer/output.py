"""Rendering of decoded statements as text tables and CSV."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from ofx_viewer.models import StatementTransactionResponse, Transaction

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from ofx_viewer.models import Balance

CSV_FIELDS = ('fitid', 'date', 'type', 'amount', 'name', 'memo')
TABLE_HEADERS = ('Date', 'Type', 'Amount', 'Name', 'Memo')


def mask_account_number(acctid: str, visible: int = 4) -> str:
    """Hide all but the trailing ``visible`` characters of ``acctid``."""

    clean = acctid.strip()
    return clean[-visible:].rjust(len(clean), '*')


def _format_balance(label: str, balance: Balance | None, date_format: str) -> str | None:
    if balance is None:
        return None
    return f'{label} {balance.balamt} as of {balance.dtasof.strftime(date_format)}'


def format_statement_header(response: StatementTransactionResponse, *, date_format: str = '%Y-%m-%d') -> list[str]:
    """Return summary lines describing one statement transaction response."""

    if not isinstance(response, StatementTransactionResponse):
        raise TypeError('invalid statement transaction response')

    statement = response.stmtrs
    account = statement.bankacctfrom
    lines = [
        f'Account {mask_account_number(account.acctid)} ({account.accttype}) at bank {account.bankid}'
        f' [{statement.curdef}]',
    ]
    tranlist = statement.banktranlist
    if tranlist is not None:
        lines.append(f'Period {tranlist.dtstart.strftime(date_format)} to {tranlist.dtend.strftime(date_format)}')
    for label, balance in (('Ledger balance', statement.ledgerbal), ('Available balance', statement.availbal)):
        line = _format_balance(label, balance, date_format)
        if line:
            lines.append(line)
    if not response.status.is_success():
        message = f': {response.status.message}' if response.status.message else ''
        lines.append(f'Status {response.status.code} {response.status.severity}{message}')
    return lines


def format_transaction_table(
    transactions: Iterable[Transaction],
    *,
    date_format: str = '%Y-%m-%d',
    limit: int = 0,
) -> list[str]:
    """Lay out ``transactions`` as aligned table rows, in the order given."""

    if not isinstance(transactions, Iterable):
        raise TypeError('transactions must be iterable')

    rows = [
        (
            txn.dtposted.strftime(date_format),
            txn.trntype,
            str(txn.trnamt),
            txn.name or '',
            txn.memo or '',
        )
        for txn in transactions
    ]
    if limit > 0:
        rows = rows[:limit]
    if not rows:
        return ['No transactions.']

    widths = [max(len(TABLE_HEADERS[idx]), *(len(row[idx]) for row in rows)) for idx in range(len(TABLE_HEADERS))]
    line_fmt = (
        f'  {{0:<{widths[0]}}} | {{1:<{widths[1]}}} | {{2:>{widths[2]}}} | {{3:<{widths[3]}}} | {{4:<{widths[4]}}}'
    )
    lines = [line_fmt.format(*TABLE_HEADERS).rstrip()]
    lines.extend(line_fmt.format(*row).rstrip() for row in rows)
    return lines


def build_csv_payload(transactions: Iterable[Transaction], *, date_format: str = '%Y-%m-%d') -> str:
    """Serialize transactions into a CSV string."""

    if not isinstance(transactions, Iterable):
        raise TypeError('transactions must be iterable')

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(CSV_FIELDS))
    writer.writeheader()
    for txn in transactions:
        writer.writerow(
            {
                'fitid': txn.fitid,
                'date': txn.dtposted.strftime(date_format),
                'type': txn.trntype,
                'amount': str(txn.trnamt),
                'name': txn.name or '',
                'memo': txn.memo or '',
            },
        )
    return buffer.getvalue()


def write_output(payload: str, *, output_path: Path | str | None) -> str:
    """Write ``payload`` to ``output_path`` if provided and return it."""

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8', newline='') as handle:
            handle.write(payload)
    return payload
