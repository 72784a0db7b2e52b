"""Domain model entities for fincore.

These are pure data classes representing business concepts, independent of
database schema. Amounts are ``Decimal`` values quantized to cents; the
computation core never sees floats.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional

from fincore.domain.errors import ValidationError


class TransactionKind(str, Enum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(str, Enum):
    """Settlement status of a transaction, derived from its payments."""

    PAID = "PAID"
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"


class PaymentStatus(str, Enum):
    """Settlement status of a single payment."""

    PAID = "PAID"
    PENDING = "PENDING"


class PaymentMethod(str, Enum):
    """How a payment is made."""

    PIX = "PIX"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BOLETO = "BOLETO"
    CASH = "CASH"
    TRANSFER = "TRANSFER"
    OTHER = "OTHER"


class AccountKind(str, Enum):
    """Kind of financial account."""

    BANK = "BANK"
    CASH = "CASH"
    DIGITAL_WALLET = "DIGITAL_WALLET"


class LineType(str, Enum):
    """Statement line types."""

    REVENUE = "REVENUE"
    DEDUCTION = "DEDUCTION"
    COST = "COST"
    EXPENSE = "EXPENSE"
    TAX = "TAX"
    SUBTOTAL = "SUBTOTAL"
    RESULT = "RESULT"

    @property
    def is_computed(self) -> bool:
        """True for lines whose value comes from a formula."""
        return self in (LineType.SUBTOTAL, LineType.RESULT)


class MappingTarget(str, Enum):
    """What a statement line mapping points at."""

    CATEGORY = "CATEGORY"
    ACCOUNT = "ACCOUNT"


class MappingOperation(str, Enum):
    """Sign applied to amounts matched by a mapping."""

    ADD = "ADD"
    SUBTRACT = "SUBTRACT"


class Granularity(str, Enum):
    """Period granularities understood by the period resolver."""

    WEEK = "WEEK"
    MONTH = "MONTH"
    SEMESTER = "SEMESTER"
    YEAR = "YEAR"
    ALL = "ALL"


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        """Return True if day falls within the range, both ends included."""
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day <= self.end

    @property
    def start_at(self) -> datetime:
        """Start of the range as a timestamp (00:00:00)."""
        return datetime.combine(self.start, time(0, 0, 0))

    @property
    def end_at(self) -> datetime:
        """End of the range as a timestamp (23:59:59)."""
        return datetime.combine(self.end, time(23, 59, 59))

    @property
    def days(self) -> int:
        """Number of calendar days covered by the range."""
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class Payment:
    """One payment backing (part of) a transaction."""

    id: str
    method: PaymentMethod
    amount: Decimal
    date: date
    status: PaymentStatus
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None

    def __post_init__(self):
        if (self.installment_number is None) != (self.total_installments is None):
            raise ValidationError(
                "installment_number and total_installments must be set together"
            )

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``status`` is not stored: it is always derived from ``payments``.
    """

    id: str
    company_id: str
    date: date
    amount: Decimal
    kind: TransactionKind
    category_id: Optional[str]
    category_name: Optional[str] = None
    description: str = ""
    account_id: Optional[str] = None
    cost_center_id: Optional[str] = None
    payments: tuple[Payment, ...] = ()

    @property
    def status(self) -> TransactionStatus:
        from fincore.domain.payments import derive_status

        return derive_status(self.payments)

    @property
    def paid_amount(self) -> Decimal:
        """Sum of the payments already settled."""
        return sum((p.amount for p in self.payments if p.is_paid), Decimal("0.00"))


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    company_id: str
    name: str
    kind: TransactionKind
    active: bool = True
    linked_account_id: Optional[str] = None


@dataclass(frozen=True)
class Account:
    """Financial account domain entity."""

    id: str
    company_id: str
    name: str
    kind: AccountKind
    balance: Decimal
    active: bool = True
    bank_name: Optional[str] = None


@dataclass(frozen=True)
class CostCenter:
    """Cost center domain entity."""

    id: str
    company_id: str
    code: str
    name: str
    active: bool = True


@dataclass(frozen=True)
class LineMapping:
    """Links a leaf statement line to a category or account."""

    target_kind: MappingTarget
    target_id: str
    operation: MappingOperation = MappingOperation.ADD


@dataclass(frozen=True)
class StatementLine:
    """One line of a statement template."""

    id: str
    name: str
    type: LineType
    order: int
    mappings: tuple[LineMapping, ...] = ()
    formula: Optional[str] = None


@dataclass(frozen=True)
class StatementTemplate:
    """Ordered set of statement lines authored for a company."""

    id: str
    company_id: str
    name: str
    lines: tuple[StatementLine, ...] = ()
    is_system_default: bool = False
    active: bool = True

    def line(self, line_id: str) -> Optional[StatementLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None


@dataclass(frozen=True)
class StatementRow:
    """Computed value of one statement line."""

    line_id: str
    name: str
    type: LineType
    value: Decimal


@dataclass(frozen=True)
class SkippedRow:
    """A raw record rejected at ingestion, with the reason."""

    index: int
    record_id: Optional[str]
    reason: str


@dataclass(frozen=True)
class LedgerQuery:
    """Optional predicates for the ledger filter. ``None`` means no filter."""

    text: Optional[str] = None
    kind: Optional[TransactionKind] = None
    status: Optional[TransactionStatus] = None
    account_id: Optional[str] = None
    cost_center_id: Optional[str] = None


@dataclass(frozen=True)
class CashFlowBucket:
    """Income and expense for one day or month of a period."""

    key: str
    start: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    accumulated: Decimal


@dataclass(frozen=True)
class StatementReport:
    """Evaluated statement for one period, with aggregation diagnostics."""

    template_id: str
    template_name: str
    period: DateRange
    label: str
    rows: tuple[StatementRow, ...]
    transaction_count: int
    excluded_transaction_ids: tuple[str, ...] = ()
    orphaned_transaction_ids: tuple[str, ...] = ()
    percentages: dict[str, Optional[Decimal]] = field(default_factory=dict)

    @property
    def excluded_count(self) -> int:
        return len(self.excluded_transaction_ids)
