"""Domain records produced by the OFX decode pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ofx_viewer.diagnostics import Diagnostics

if TYPE_CHECKING:  # pragma: no cover - type-checking imports only
    from datetime import datetime
    from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Header:
    """Decoded plain-text header of an OFX 1.02 file."""

    version: str
    security: str | None = None
    encoding: str | None = None
    charset: str | None = None
    compression: str | None = None
    old_file_uid: str | None = None
    new_file_uid: str | None = None


@dataclass(frozen=True, slots=True)
class Status:
    """``<STATUS>`` block of a response."""

    code: int
    severity: str
    message: str | None = None

    def is_success(self) -> bool:
        return self.code == 0


@dataclass(frozen=True, slots=True)
class FinancialInstitution:
    org: str
    fid: str | None = None


@dataclass(frozen=True, slots=True)
class SignonResponse:
    """Sign-on response (``<SONRS>``)."""

    status: Status
    dtserver: datetime
    language: str | None = None
    dtprofup: datetime | None = None
    fi: FinancialInstitution | None = None


@dataclass(frozen=True, slots=True)
class BankAccount:
    bankid: str
    acctid: str
    accttype: str


@dataclass(frozen=True, slots=True)
class Transaction:
    """Single statement transaction (``<STMTTRN>``)."""

    trntype: str
    dtposted: datetime
    trnamt: Decimal
    fitid: str
    name: str | None = None
    memo: str | None = None


@dataclass(frozen=True, slots=True)
class BankTransactionList:
    dtstart: datetime
    dtend: datetime
    transactions: tuple[Transaction, ...] = ()


@dataclass(frozen=True, slots=True)
class Balance:
    balamt: Decimal
    dtasof: datetime


@dataclass(frozen=True, slots=True)
class StatementResponse:
    """Statement payload (``<STMTRS>``) for one bank account."""

    curdef: str
    bankacctfrom: BankAccount
    banktranlist: BankTransactionList | None = None
    ledgerbal: Balance | None = None
    availbal: Balance | None = None

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        if self.banktranlist is None:
            return ()
        return self.banktranlist.transactions


@dataclass(frozen=True, slots=True)
class StatementTransactionResponse:
    trnuid: str
    status: Status
    stmtrs: StatementResponse


@dataclass(frozen=True, slots=True)
class OfxDocument:
    """Root of a decoded OFX 1.02 bank statement file."""

    header: Header
    signon: SignonResponse
    bank_msgs: tuple[StatementTransactionResponse, ...]

    @property
    def statements(self) -> tuple[StatementResponse, ...]:
        return tuple(response.stmtrs for response in self.bank_msgs)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Every transaction of every statement, in document order."""

        return tuple(txn for statement in self.statements for txn in statement.transactions)


@dataclass(slots=True)
class ProcessingJob:
    """A statement source to load: a local path or an ``http(s)`` URL."""

    source: str

    @property
    def is_remote(self) -> bool:
        return self.source.lower().startswith(('http://', 'https://'))

    @property
    def name(self) -> str:
        if self.is_remote:
            return self.source.rstrip('/').rsplit('/', 1)[-1]
        return Path(self.source).name


@dataclass(slots=True)
class ProcessingResult:
    """Outcome of loading and decoding a single job."""

    job: ProcessingJob
    document: OfxDocument | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def has_transactions(self) -> bool:
        """Return ``True`` if the decoded document holds at least one transaction."""

        return self.document is not None and bool(self.document.transactions)

    @property
    def warnings(self) -> list[str]:
        return [str(entry) for entry in self.diagnostics.problems()]

    def summary(self) -> str:
        """Return a human readable summary string for logging/UX."""

        if self.document is None:
            return f'{self.job.name}: not decoded'
        statements = self.document.statements
        count = len(self.document.transactions)
        accounts = ', '.join(statement.bankacctfrom.acctid for statement in statements)
        account_text = f'accounts {accounts}' if accounts else 'no account info'
        return f'{self.job.name}: {count} transactions in {len(statements)} statements, {account_text}'
