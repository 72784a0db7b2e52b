"""Domain layer for fincore."""

_SERVICES = {
    "TransactionService": "fincore.domain.transaction",
    "CategoryService": "fincore.domain.category",
    "AccountService": "fincore.domain.account",
    "TemplateService": "fincore.domain.template",
    "ReportService": "fincore.domain.report",
}

__all__ = list(_SERVICES)


# Services import the database layer, which imports domain entities, so load
# them lazily to avoid circular dependencies
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
