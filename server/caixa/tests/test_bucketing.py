from datetime import date
from decimal import Decimal

import pytest

from caixa.reports.bucketing import bucketize
from caixa.reports.errors import ValidationError
from caixa.reports.records import Basis, EntryType, LedgerEntry, Payable, StoredStatus


def entry(entry_id, day, kind, amount, competence=None, status=StoredStatus.CONFIRMED):
    return LedgerEntry(
        id=entry_id,
        company_id=1,
        date=day,
        type=kind,
        amount=Decimal(amount),
        status=status,
        competence_date=competence,
    )


def test_same_day_entries_share_a_bucket():
    entries = [
        entry(1, date(2024, 3, 5), EntryType.INCOME, "100.00"),
        entry(2, date(2024, 3, 5), EntryType.INCOME, "50.00"),
        entry(3, date(2024, 3, 5), EntryType.EXPENSE, "30.00"),
    ]

    points = bucketize(entries, date(2024, 3, 5), date(2024, 3, 5), Decimal("200.00"))

    assert len(points) == 1
    assert points[0].income == Decimal("150.00")
    assert points[0].expense == Decimal("30.00")
    assert points[0].balance == Decimal("320.00")
    assert points[0].opening_balance == Decimal("200.00")


def test_days_without_entries_carry_the_balance_forward():
    entries = [
        entry(1, date(2024, 3, 1), EntryType.INCOME, "10.00"),
        entry(2, date(2024, 3, 4), EntryType.EXPENSE, "4.00"),
    ]

    points = bucketize(entries, date(2024, 3, 1), date(2024, 3, 5), Decimal("0"))

    assert [point.date for point in points] == [date(2024, 3, day) for day in range(1, 6)]
    assert [point.balance for point in points] == [Decimal("10.00")] * 3 + [Decimal("6.00")] * 2
    assert points[1].income == Decimal("0") and points[1].expense == Decimal("0")


def test_net_movement_matches_balance_change():
    entries = [
        entry(index, date(2024, 1, 1 + index % 28), EntryType.INCOME if index % 3 else EntryType.EXPENSE, f"{index}.10")
        for index in range(1, 60)
    ]
    opening = Decimal("1000.00")

    points = bucketize(entries, date(2024, 1, 1), date(2024, 1, 31), opening)

    total_income = sum(point.income for point in points)
    total_expense = sum(point.expense for point in points)
    assert total_income - total_expense == points[-1].balance - opening


def test_entries_outside_range_are_ignored():
    entries = [
        entry(1, date(2024, 2, 29), EntryType.INCOME, "999.00"),
        entry(2, date(2024, 3, 2), EntryType.INCOME, "1.00"),
    ]

    points = bucketize(entries, date(2024, 3, 1), date(2024, 3, 2), Decimal("5"))

    assert points[-1].balance == Decimal("6.00")


def test_accrual_basis_files_entries_under_competence_date():
    entries = [
        entry(1, date(2024, 3, 10), EntryType.INCOME, "80.00", competence=date(2024, 3, 1)),
        entry(2, date(2024, 3, 2), EntryType.EXPENSE, "20.00"),
    ]

    cash = bucketize(entries, date(2024, 3, 1), date(2024, 3, 2), Decimal("0"), basis=Basis.CASH)
    accrual = bucketize(entries, date(2024, 3, 1), date(2024, 3, 2), Decimal("0"), basis="accrual")

    assert cash[0].income == Decimal("0")
    assert accrual[0].income == Decimal("80.00")
    assert accrual[1].expense == Decimal("20.00")
    assert accrual[-1].balance == Decimal("60.00")


def test_payables_fall_on_their_settlement_date():
    paid = Payable(id=1, company_id=1, amount=Decimal("75.00"), due_date=date(2024, 3, 1), status=StoredStatus.PAID, paid_date=date(2024, 3, 2))
    open_item = Payable(id=2, company_id=1, amount=Decimal("5.00"), due_date=date(2024, 3, 1))

    points = bucketize([paid, open_item], date(2024, 3, 1), date(2024, 3, 2), Decimal("100.00"))

    assert points[0].expense == Decimal("5.00")
    assert points[1].expense == Decimal("75.00")
    assert points[1].balance == Decimal("20.00")


def test_days_after_as_of_are_marked_projected():
    points = bucketize([], date(2024, 3, 1), date(2024, 3, 3), Decimal("0"), as_of=date(2024, 3, 2))

    assert [point.projected for point in points] == [False, False, True]


def test_bucketize_is_deterministic():
    entries = [entry(i, date(2024, 5, 1 + i % 5), EntryType.INCOME, "1.25") for i in range(20)]

    first = bucketize(entries, "2024-05-01", "2024-05-07", Decimal("3.00"))
    second = bucketize(entries, "2024-05-01", "2024-05-07", Decimal("3.00"))

    assert first == second


def test_running_balance_stays_exact_over_long_ranges():
    entries = [entry(i, date(2023, 1, 1), EntryType.INCOME, "0.10") for i in range(1000)]

    points = bucketize(entries, date(2023, 1, 1), date(2023, 12, 31), Decimal("0"))

    assert points[-1].balance == Decimal("100.00")
    assert len(points) == 365


def test_inverted_range_raises_validation_error():
    with pytest.raises(ValidationError):
        bucketize([], date(2024, 3, 5), date(2024, 3, 1), Decimal("0"))


def test_unknown_basis_raises_validation_error():
    with pytest.raises(ValidationError):
        bucketize([], date(2024, 3, 1), date(2024, 3, 1), Decimal("0"), basis="hybrid")
