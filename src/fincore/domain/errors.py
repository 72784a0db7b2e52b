"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(DomainError):
    """Malformed statement template (bad formula, cycle, dangling mapping)."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def template_not_found(template_id: str) -> str:
    """Return message for missing statement template."""
    return f"Statement template {template_id} not found"


def no_template_available(company_id: str) -> str:
    """Return message when a company has no usable statement template."""
    return f"Company '{company_id}' has no active statement template"


def duplicate_line_id(line_id: str, template_id: str) -> str:
    """Return message for a line id used twice in one template."""
    return f"Line '{line_id}' already exists in template {template_id}"


def unbalanced_payments(reason: str) -> str:
    """Return message when a transaction's payments do not add up."""
    return f"Cannot save transaction: {reason}"


def unknown_formula_reference(line_id: str, reference: str) -> str:
    """Return message for a formula pointing at a line that does not exist."""
    return f"Line '{line_id}' references unknown line '{reference}' in its formula"


def missing_formula(line_id: str, line_type: str) -> str:
    """Return message for a computed line without a formula."""
    return f"Line '{line_id}' is of type {line_type} but has no formula"


def formula_cycle(cycle: list[str]) -> str:
    """Return message for a cyclic chain of formulas."""
    return f"Cyclic formula dependency: {' -> '.join(cycle)}"


def dangling_mapping(line_id: str, target_kind: str, target_id: str) -> str:
    """Return message for a mapping whose target no longer exists."""
    return (
        f"Line '{line_id}' maps {target_kind.lower()} '{target_id}', "
        "which does not exist"
    )
