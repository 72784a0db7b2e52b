"""Statement template domain service.

Template authoring belongs to the application around fincore; this service
only offers the small set of helpers needed to seed a store and to pick and
check the template a report runs on.
"""

import logging
from typing import Optional, Sequence

from fincore.database.base import Database
from fincore.domain.entities import (
    Account,
    Category,
    LineMapping,
    LineType,
    MappingTarget,
    StatementLine,
    StatementTemplate,
)
from fincore.domain.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    dangling_mapping,
    duplicate_line_id,
    no_template_available,
    template_not_found,
)
from fincore.domain.statement import evaluation_order, parse_formula

logger = logging.getLogger(__name__)


class TemplateService:
    """Service for statement templates."""

    def __init__(self, db: Database):
        """Initialize template service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_template(
        self, company_id: str, name: str, is_system_default: bool = False
    ) -> str:
        """Create an empty template.

        Returns:
            Template ID

        Raises:
            ValidationError: If the name is blank
        """
        name = name.strip()
        if not name:
            raise ValidationError("Template name cannot be empty")
        return self.db.create_statement_template(
            company_id=company_id, name=name, is_system_default=is_system_default
        )

    def add_line(
        self,
        template_id: str,
        line_id: str,
        name: str,
        line_type: LineType,
        mappings: Sequence[LineMapping] = (),
        formula: Optional[str] = None,
        order: Optional[int] = None,
    ) -> StatementLine:
        """Append a line to a template.

        Formulas may reference lines that are added later, so references are
        only checked by ``validate_template``; the formula syntax is checked
        here.

        Args:
            template_id: Template to extend
            line_id: Identifier used by formulas (unique in the template)
            name: Display name
            line_type: Leaf type or SUBTOTAL/RESULT
            mappings: Category/account mappings (leaf lines only)
            formula: '+'/'-' expression over line ids (computed lines only)
            order: Position; defaults to after the last line

        Returns:
            The stored line

        Raises:
            NotFoundError: If template doesn't exist
            ConflictError: If line_id is already used in the template
            ConfigurationError: If the formula/mappings don't fit the line type
        """
        template = self.get_template(template_id)
        line_type = LineType(line_type)
        line_id = line_id.strip()
        if not line_id:
            raise ValidationError("Line id cannot be empty")
        if template.line(line_id) is not None:
            raise ConflictError(duplicate_line_id(line_id, template_id))

        if line_type.is_computed:
            if mappings:
                raise ConfigurationError(
                    f"Line '{line_id}' is of type {line_type.value} and cannot have mappings"
                )
            if not formula:
                raise ConfigurationError(
                    f"Line '{line_id}' is of type {line_type.value} but has no formula"
                )
            parse_formula(formula)
        elif formula:
            raise ConfigurationError(
                f"Line '{line_id}' is of type {line_type.value} and cannot have a formula"
            )

        if order is None:
            order = max((line.order for line in template.lines), default=-1) + 1

        line = StatementLine(
            id=line_id,
            name=name,
            type=line_type,
            order=order,
            mappings=tuple(mappings),
            formula=formula,
        )
        self.db.add_statement_line(template_id, line)
        return line

    def get_template(self, template_id: str) -> StatementTemplate:
        """Get a template with its lines.

        Raises:
            NotFoundError: If template doesn't exist
        """
        template = self.db.get_statement_template(template_id)
        if template is None:
            raise NotFoundError(template_not_found(template_id))
        return template

    def list_templates(self, company_id: str) -> list[StatementTemplate]:
        """List templates of a company, system default first (without lines)."""
        return self.db.fetch_statement_templates(company_id)

    def select_template(
        self, company_id: str, template_id: Optional[str] = None
    ) -> StatementTemplate:
        """Pick the template a report runs on.

        An explicit id wins; otherwise the company's system-default template,
        otherwise its first active template.

        Raises:
            NotFoundError: If the id is unknown or the company has no template
        """
        if template_id is not None:
            template = self.get_template(template_id)
            if template.company_id != company_id:
                raise NotFoundError(template_not_found(template_id))
            return template

        candidates = [t for t in self.db.fetch_statement_templates(company_id) if t.active]
        if not candidates:
            raise NotFoundError(no_template_available(company_id))
        chosen = next((t for t in candidates if t.is_system_default), candidates[0])
        logger.debug("Selected template %s (%s) for %s", chosen.id, chosen.name, company_id)
        return self.get_template(chosen.id)

    def validate_template(
        self,
        template: StatementTemplate,
        categories: Optional[Sequence[Category]] = None,
        accounts: Optional[Sequence[Account]] = None,
    ) -> list[str]:
        """Check a template before it is evaluated.

        Args:
            template: Template with its lines
            categories: Current categories (fetched when omitted)
            accounts: Current accounts (fetched when omitted)

        Returns:
            Computed line ids in evaluation order

        Raises:
            ConfigurationError: On a mapping to a missing category or account,
                or on any formula problem (unknown reference, cycle, ...)
        """
        if categories is None:
            categories = self.db.fetch_categories(template.company_id)
        if accounts is None:
            accounts = self.db.fetch_accounts(template.company_id)

        known = {
            MappingTarget.CATEGORY: {c.id for c in categories},
            MappingTarget.ACCOUNT: {a.id for a in accounts},
        }
        for line in template.lines:
            for mapping in line.mappings:
                if mapping.target_id not in known[mapping.target_kind]:
                    raise ConfigurationError(
                        dangling_mapping(line.id, mapping.target_kind.value, mapping.target_id)
                    )

        return evaluation_order(template)
