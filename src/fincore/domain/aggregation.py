"""Aggregation of transactions into statement line buckets.

Each leaf line of a template (REVENUE, DEDUCTION, COST, EXPENSE, TAX) owns a
bucket. A transaction adds its amount to every leaf line having at least one
mapping it satisfies. Lines are independent, so a category mapped by two
lines is counted in both.

Category matching uses the category id when the transaction's category is
still known. When the id is no longer in the category list (the category
was deleted or re-created), the category name recorded on the transaction
is compared with the mapped category's name instead. Transactions that end
up in no bucket are excluded from the statement and reported, not raised.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from fincore.domain.entities import (
    Category,
    LineMapping,
    MappingOperation,
    MappingTarget,
    StatementLine,
    StatementTemplate,
    Transaction,
)
from fincore.domain.statement import check_unique_line_ids
from fincore.utils.money import ZERO, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    """Bucket values per leaf line plus exclusion diagnostics."""

    values: dict[str, Decimal]
    matched_count: int
    excluded: tuple[str, ...] = ()
    orphaned: tuple[str, ...] = ()

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)


class CategoryIndex:
    """Lookup helper over the current category list."""

    def __init__(self, categories: Sequence[Category]):
        self.by_id: dict[str, Category] = {c.id: c for c in categories}
        self.by_name: dict[str, Category] = {}
        for category in categories:
            self.by_name.setdefault(category.name.strip(), category)

    def is_known(self, category_id: Optional[str]) -> bool:
        return category_id is not None and category_id in self.by_id

    def resolve(self, txn: Transaction) -> Optional[Category]:
        """Return the transaction's category, by id first, then by name."""
        if self.is_known(txn.category_id):
            return self.by_id[txn.category_id]
        if txn.category_name:
            return self.by_name.get(txn.category_name.strip())
        return None


def mapping_matches(
    mapping: LineMapping, txn: Transaction, categories: CategoryIndex
) -> bool:
    """Return True if a transaction satisfies one line mapping."""
    if mapping.target_kind == MappingTarget.CATEGORY:
        if categories.is_known(txn.category_id):
            return txn.category_id == mapping.target_id
        # Fallback for transactions whose category id is gone
        target = categories.by_id.get(mapping.target_id)
        return (
            target is not None
            and txn.category_name is not None
            and txn.category_name.strip() == target.name.strip()
        )

    if mapping.target_kind == MappingTarget.ACCOUNT:
        if txn.account_id is not None and txn.account_id == mapping.target_id:
            return True
        category = categories.resolve(txn)
        return category is not None and category.linked_account_id == mapping.target_id

    return False


def first_matching_mapping(
    line: StatementLine, txn: Transaction, categories: CategoryIndex
) -> Optional[LineMapping]:
    for mapping in line.mappings:
        if mapping_matches(mapping, txn, categories):
            return mapping
    return None


def aggregate(
    transactions: Sequence[Transaction],
    template: StatementTemplate,
    categories: Sequence[Category],
) -> AggregationResult:
    """Sum transaction amounts into the template's leaf lines.

    Args:
        transactions: Already filtered transactions (usually one period)
        template: Statement template whose leaf lines receive the amounts
        categories: Current category list of the company

    Returns:
        AggregationResult with one value per leaf line (0.00 when nothing
        matched) and the ids of excluded and orphaned transactions

    Raises:
        ConfigurationError: If two lines of the template share an id
    """
    check_unique_line_ids(template)
    index = CategoryIndex(categories)
    leaf_lines = [line for line in template.lines if not line.type.is_computed]
    values: dict[str, Decimal] = {line.id: ZERO for line in leaf_lines}

    excluded: list[str] = []
    orphaned: list[str] = []
    matched = 0

    for txn in transactions:
        if txn.category_id is not None and not index.is_known(txn.category_id):
            orphaned.append(txn.id)

        hit = False
        for line in leaf_lines:
            mapping = first_matching_mapping(line, txn, index)
            if mapping is None:
                continue
            amount = to_money(txn.amount)
            if mapping.operation == MappingOperation.SUBTRACT:
                amount = -amount
            values[line.id] += amount
            hit = True

        if hit:
            matched += 1
        else:
            excluded.append(txn.id)
            logger.debug(
                "Transaction %s (category=%s) matches no line of template %s",
                txn.id,
                txn.category_id,
                template.id,
            )

    if excluded or orphaned:
        logger.info(
            "Template %s: %d transaction(s) excluded, %d with unknown category",
            template.id,
            len(excluded),
            len(orphaned),
        )

    return AggregationResult(
        values=values,
        matched_count=matched,
        excluded=tuple(excluded),
        orphaned=tuple(orphaned),
    )
