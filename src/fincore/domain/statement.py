"""Statement evaluation.

Leaf lines take their value from the aggregator. SUBTOTAL and RESULT lines
are computed from an explicit formula over other line ids, for example::

    net_revenue   = "revenue - deductions"
    gross_result  = "net_revenue - costs"
    final_result  = "gross_result - expenses - taxes"

A term is either a bare identifier (letters, digits, ``_`` and ``.``,
not starting with a digit) or any id wrapped in brackets, which is how ids
containing dashes are written: ``[6f1c-...] - [0b2e-...]``. Only ``+`` and
``-`` are allowed.

Formulas are resolved in dependency order, so a line may reference lines
appearing later in the template. Unknown references, malformed formulas,
computed lines without a formula and cycles are configuration errors.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from graphlib import CycleError, TopologicalSorter
from typing import Mapping, Optional, Sequence

from fincore.domain.entities import LineType, StatementLine, StatementRow, StatementTemplate
from fincore.domain.errors import (
    ConfigurationError,
    formula_cycle,
    missing_formula,
    unknown_formula_reference,
)
from fincore.utils.money import ZERO, to_money

_TOKEN = re.compile(r"\s*(?:(?P<op>[+-])|\[(?P<bracketed>[^\]]+)\]|(?P<name>[A-Za-z_][A-Za-z0-9_.]*))")


@dataclass(frozen=True)
class FormulaTerm:
    """One signed reference inside a formula."""

    sign: int
    line_id: str


def parse_formula(formula: str) -> tuple[FormulaTerm, ...]:
    """Parse a '+'/'-' formula into signed line references.

    Raises:
        ConfigurationError: If the formula is empty or malformed
    """
    if formula is None or not formula.strip():
        raise ConfigurationError("Empty formula")

    terms: list[FormulaTerm] = []
    sign = 1
    expect_term = True
    after_operator = False
    pos = 0
    text = formula.rstrip()

    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None or match.end() == pos:
            raise ConfigurationError(
                f"Invalid formula '{formula}': unexpected character at position {pos}"
            )
        pos = match.end()

        op = match.group("op")
        if op is not None:
            if after_operator:
                # Two operators in a row
                raise ConfigurationError(f"Invalid formula '{formula}': dangling operator")
            sign = -1 if op == "-" else 1
            expect_term = True
            after_operator = True
            continue

        if not expect_term:
            raise ConfigurationError(
                f"Invalid formula '{formula}': missing operator before '{match.group(0).strip()}'"
            )
        line_id = (match.group("bracketed") or match.group("name")).strip()
        terms.append(FormulaTerm(sign=sign, line_id=line_id))
        sign = 1
        expect_term = False
        after_operator = False

    if expect_term:
        raise ConfigurationError(f"Invalid formula '{formula}': missing term")
    return tuple(terms)


def format_formula(terms: Sequence[FormulaTerm]) -> str:
    """Render terms back to formula text, bracketing ids when needed."""
    parts: list[str] = []
    for i, term in enumerate(terms):
        ref = term.line_id
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_.]*", ref):
            ref = f"[{ref}]"
        if i == 0:
            parts.append(ref if term.sign > 0 else f"-{ref}")
        else:
            parts.append(f"{'+' if term.sign > 0 else '-'} {ref}")
    return " ".join(parts)


def check_unique_line_ids(template: StatementTemplate) -> set[str]:
    """Return the line ids of a template, rejecting duplicates."""
    known: set[str] = set()
    for line in template.lines:
        if line.id in known:
            raise ConfigurationError(f"Duplicate line id '{line.id}' in template {template.id}")
        known.add(line.id)
    return known


def formula_dependencies(template: StatementTemplate) -> dict[str, tuple[FormulaTerm, ...]]:
    """Parse and check every formula of a template.

    Returns:
        Mapping of computed line id -> parsed terms

    Raises:
        ConfigurationError: On duplicate ids, missing/unknown references,
            formulas on leaf lines or mappings on computed lines
    """
    known = check_unique_line_ids(template)

    parsed: dict[str, tuple[FormulaTerm, ...]] = {}
    for line in template.lines:
        if not line.type.is_computed:
            if line.formula:
                raise ConfigurationError(
                    f"Line '{line.id}' is of type {line.type.value} and cannot have a formula"
                )
            continue

        if line.mappings:
            raise ConfigurationError(
                f"Line '{line.id}' is of type {line.type.value} and cannot have mappings"
            )
        if not line.formula or not line.formula.strip():
            raise ConfigurationError(missing_formula(line.id, line.type.value))

        try:
            terms = parse_formula(line.formula)
        except ConfigurationError as e:
            raise ConfigurationError(f"Line '{line.id}': {e}") from e
        for term in terms:
            if term.line_id not in known:
                raise ConfigurationError(unknown_formula_reference(line.id, term.line_id))
        parsed[line.id] = terms
    return parsed


def evaluation_order(template: StatementTemplate) -> list[str]:
    """Return computed line ids ordered so dependencies come first."""
    parsed = formula_dependencies(template)
    sorter: TopologicalSorter = TopologicalSorter()
    for line in template.lines:
        if line.id in parsed:
            sorter.add(line.id, *(t.line_id for t in parsed[line.id]))
    try:
        order = list(sorter.static_order())
    except CycleError as e:
        raise ConfigurationError(formula_cycle(list(e.args[1]))) from e
    return [line_id for line_id in order if line_id in parsed]


def evaluate(
    aggregates: Mapping[str, Decimal], template: StatementTemplate
) -> list[StatementRow]:
    """Compute every line of a template.

    Args:
        aggregates: Leaf line id -> aggregated amount (missing ids count as 0)
        template: Statement template

    Returns:
        One StatementRow per template line, in template order
    """
    parsed = formula_dependencies(template)
    values: dict[str, Decimal] = {}
    for line in template.lines:
        if not line.type.is_computed:
            values[line.id] = to_money(aggregates.get(line.id, ZERO))

    for line_id in evaluation_order(template):
        values[line_id] = sum(
            (term.sign * values[term.line_id] for term in parsed[line_id]), ZERO
        )

    return [
        StatementRow(line_id=line.id, name=line.name, type=line.type, value=values[line.id])
        for line in template.lines
    ]


def percent_of(
    rows: Sequence[StatementRow], base_line_id: str
) -> dict[str, Optional[Decimal]]:
    """Express every row as a percentage of a base row (usually revenue).

    A zero base yields ``None`` for every row, rendered as N/A.
    """
    base = next((r.value for r in rows if r.line_id == base_line_id), None)
    if base is None:
        raise ConfigurationError(f"Unknown base line '{base_line_id}'")
    if base == 0:
        return {row.line_id: None for row in rows}
    return {row.line_id: to_money(row.value / base * 100) for row in rows}


def first_line_of_type(
    template: StatementTemplate, line_type: LineType
) -> Optional[StatementLine]:
    """Return the first line of a type, e.g. the revenue line for percentages."""
    return next((line for line in template.lines if line.type == line_type), None)
