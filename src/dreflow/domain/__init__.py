"""Domain layer for dreflow application.

Services are imported lazily so that the database layer can import
``dreflow.domain.entities`` without pulling the services (and through them
the database layer itself) back in.
"""

_SERVICES = {
    "CategoryService": "dreflow.domain.category",
    "RuleService": "dreflow.domain.rules",
    "PeriodService": "dreflow.domain.period",
    "ImportService": "dreflow.domain.statement_import",
    "TransactionService": "dreflow.domain.transaction",
    "StatementService": "dreflow.domain.statement",
}


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = list(_SERVICES)
