"""Report domain service.

Runs the reporting pipeline for one period:
period resolver -> ledger filter -> line aggregator -> statement evaluator.
"""

import logging
from decimal import Decimal
from typing import Optional

from fincore.database.base import Database
from fincore.domain.aggregation import aggregate
from fincore.domain.entities import (
    CashFlowBucket,
    DateRange,
    Granularity,
    LedgerQuery,
    LineType,
    StatementReport,
    TransactionKind,
)
from fincore.domain.ledger import filter_transactions
from fincore.domain.periods import PeriodContext, bucket_key, buckets
from fincore.domain.statement import evaluate, first_line_of_type, percent_of
from fincore.domain.template import TemplateService
from fincore.utils.money import ZERO

logger = logging.getLogger(__name__)


class ReportService:
    """Service for statements and cash flow reports."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db
        self.templates = TemplateService(db)

    def build_statement(
        self,
        company_id: str,
        context: PeriodContext,
        template_id: Optional[str] = None,
        query: Optional[LedgerQuery] = None,
        percent: bool = False,
        check_mappings: bool = True,
    ) -> StatementReport:
        """Evaluate a statement template over one period.

        Args:
            company_id: Company to report on
            context: Period being looked at
            template_id: Explicit template; defaults to the system default
            query: Optional ledger predicates applied before aggregation
            percent: Also compute each line as a percentage of the first
                REVENUE line
            check_mappings: Reject templates mapping deleted categories or
                accounts before evaluating

        Returns:
            StatementReport with one row per template line

        Raises:
            NotFoundError: If no template can be selected
            ConfigurationError: If the template is malformed
        """
        template = self.templates.select_template(company_id, template_id)
        categories = self.db.fetch_categories(company_id)

        if check_mappings:
            self.templates.validate_template(
                template, categories, self.db.fetch_accounts(company_id)
            )

        period = context.range
        transactions = filter_transactions(
            self.db.fetch_transactions(company_id, date_range=period), period, query
        )
        result = aggregate(transactions, template, categories)
        rows = evaluate(result.values, template)

        percentages: dict[str, Optional[Decimal]] = {}
        if percent:
            base = first_line_of_type(template, LineType.REVENUE)
            if base is not None:
                percentages = percent_of(rows, base.id)
            else:
                logger.warning("Template %s has no REVENUE line; no percentages", template.id)

        logger.info(
            "Statement %s for %s: %d transaction(s), %d excluded",
            template.name,
            context.label,
            len(transactions),
            result.excluded_count,
        )
        return StatementReport(
            template_id=template.id,
            template_name=template.name,
            period=period,
            label=context.label,
            rows=tuple(rows),
            transaction_count=len(transactions),
            excluded_transaction_ids=result.excluded,
            orphaned_transaction_ids=result.orphaned,
            percentages=percentages,
        )

    def cash_flow(
        self,
        company_id: str,
        context: PeriodContext,
        query: Optional[LedgerQuery] = None,
    ) -> list[CashFlowBucket]:
        """Income and expense per day (week/month) or per month (longer periods).

        ``accumulated`` is the running balance from the start of the period.
        For ALL the buckets span from the first to the last transaction.
        """
        period = context.range
        transactions = filter_transactions(
            self.db.fetch_transactions(company_id, date_range=period), period, query
        )

        if context.granularity == Granularity.ALL:
            if not transactions:
                return []
            period = DateRange(
                start=min(t.date for t in transactions),
                end=max(t.date for t in transactions),
            )

        totals: dict[str, list[Decimal]] = {}
        for txn in transactions:
            entry = totals.setdefault(bucket_key(txn.date, context.granularity), [ZERO, ZERO])
            if txn.kind == TransactionKind.INCOME:
                entry[0] += txn.amount
            else:
                entry[1] += txn.amount

        result: list[CashFlowBucket] = []
        accumulated = ZERO
        for start in buckets(period, context.granularity):
            key = bucket_key(start, context.granularity)
            income, expense = totals.get(key, (ZERO, ZERO))
            balance = income - expense
            accumulated += balance
            result.append(
                CashFlowBucket(
                    key=key,
                    start=start,
                    income=income,
                    expense=expense,
                    balance=balance,
                    accumulated=accumulated,
                )
            )
        return result
