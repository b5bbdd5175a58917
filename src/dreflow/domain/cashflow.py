"""Monthly cash flow summary built from stored transactions."""

from decimal import Decimal
from typing import Iterable

from dreflow.domain.entities import (
    CashFlowMonth,
    CashFlowSummary,
    PersistedTransaction,
    TransactionKind,
    TransactionStatus,
)

ZERO = Decimal("0")


def calculate_cash_flow(
    transactions: Iterable[PersistedTransaction], opening_balance: Decimal = ZERO
) -> CashFlowSummary:
    """Group transactions by calendar month and carry a running balance.

    Cancelled transactions are left out. Pending ones count, so the result is
    a projection as much as a record. Months without transactions are not
    listed.

    Args:
        transactions: Transactions in any order
        opening_balance: Balance before the first month

    Returns:
        CashFlowSummary with months in ascending order
    """
    # month -> [income, expense]
    totals: dict[str, list[Decimal]] = {}
    for txn in transactions:
        if txn.status == TransactionStatus.CANCELLED:
            continue
        month_totals = totals.setdefault(txn.date.strftime("%Y-%m"), [ZERO, ZERO])
        month_totals[0 if txn.kind == TransactionKind.INCOME else 1] += txn.value

    months = []
    balance = Decimal(opening_balance)
    for month in sorted(totals):
        month_income, month_expense = totals[month]
        net = month_income - month_expense
        balance += net
        months.append(
            CashFlowMonth(
                month=month,
                total_income=month_income,
                total_expense=month_expense,
                net_flow=net,
                cumulative_balance=balance,
            )
        )

    total_income = sum((m.total_income for m in months), ZERO)
    total_expense = sum((m.total_expense for m in months), ZERO)
    return CashFlowSummary(
        months=tuple(months),
        total_income=total_income,
        total_expense=total_expense,
        net_total=total_income - total_expense,
        opening_balance=Decimal(opening_balance),
        closing_balance=balance,
    )
