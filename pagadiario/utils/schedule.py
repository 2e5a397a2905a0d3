from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Union

FREQUENCY_STEPS = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
}


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PaymentScheduleItem:
    due_date: date
    amount: Decimal
    installment_number: int


def _exact(x) -> Decimal:
    if x is None:
        return Decimal("0")
    try:
        value = x if isinstance(x, Decimal) else Decimal(str(x))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {x!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {x!r}")
    return value


def generate_payment_schedule(
        total_amount,
        installment_amount,
        frequency: str,
        start_date: Union[date, str],
) -> List[PaymentScheduleItem]:
    """
    Split a debt into installments of `installment_amount`; the last one
    takes whatever remains.

    Example:
      total=1000, installment=300, daily, 2024-01-01
        => 300 (01-01), 300 (01-02), 300 (01-03), 100 (01-04)

    Amounts are exact (no rounding), so they always add up to the total.
    A non-positive total yields an empty schedule.
    """
    if frequency not in FREQUENCY_STEPS:
        raise ValueError(f"Unsupported frequency: {frequency!r}")

    remaining = _exact(total_amount)
    if remaining <= 0:
        return []

    installment = _exact(installment_amount)
    if installment <= 0:
        raise ValueError("installment_amount must be > 0")

    if isinstance(start_date, str):
        start_date = date.fromisoformat(start_date)

    step = FREQUENCY_STEPS[frequency]
    schedule: List[PaymentScheduleItem] = []
    due = start_date
    number = 1

    while remaining > 0:
        amount = min(installment, remaining)
        schedule.append(PaymentScheduleItem(due_date=due, amount=amount, installment_number=number))
        remaining -= amount
        number += 1
        due += step

    return schedule
