from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from caixa.db import Base
from caixa.models import AccountPayable, AccountReceivable, BalanceAdjustment, CashFlowEntry, Category, Company
from caixa.reports import service
from caixa.reports.errors import NotFoundError, UpstreamError, ValidationError
from caixa.reports.periods import DateRange
from caixa.reports.records import Basis, EntryType, StoredStatus
from caixa.reports.store import SqlAlchemyReportStore

MAY = DateRange(date(2024, 5, 1), date(2024, 5, 31))
JUNE = DateRange(date(2024, 6, 1), date(2024, 6, 30))


def _session_factory(create_tables=True):
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def ledger(company, day, kind, amount, status="confirmed", competence=None, category=None):
    return CashFlowEntry(
        company_id=company.id,
        date=day,
        competence_date=competence,
        type=kind,
        description=f"{kind} {amount}",
        amount=Decimal(amount),
        status=status,
        category_id=category.id if category else None,
    )


@pytest.fixture()
def db():
    TestingSessionLocal = _session_factory()
    with TestingSessionLocal() as session:
        alpha = Company(name="Padaria Alfa", cnpj="11.111.111/0001-11", opex_breakdown="fixed_ratio")
        beta = Company(name="Oficina Beta", cnpj="22.222.222/0001-22")
        session.add_all([alpha, beta])
        session.flush()

        rent = Category(company_id=alpha.id, name="Rent", type="expense", dre_category="operational_expenses")
        sales = Category(company_id=alpha.id, name="Sales", type="income", dre_category="revenue")
        session.add_all([rent, sales])
        session.flush()

        session.add_all(
            [
                BalanceAdjustment(
                    company_id=alpha.id,
                    date=date(2024, 1, 1),
                    balance_type="initial",
                    description="Opening cash",
                    amount=Decimal("1000.00"),
                ),
                BalanceAdjustment(
                    company_id=alpha.id,
                    date=date(2024, 3, 31),
                    balance_type="final",
                    description="Quarter close",
                    amount=Decimal("7777.00"),
                ),
                ledger(alpha, date(2024, 5, 20), "income", "200.00", category=sales),
                ledger(alpha, date(2024, 5, 25), "expense", "50.00", category=rent),
                ledger(alpha, date(2024, 5, 28), "income", "999.00", status="pending"),
                ledger(alpha, date(2024, 6, 2), "income", "40.00"),
                ledger(alpha, date(2024, 6, 3), "expense", "15.00", competence=date(2024, 5, 31), category=rent),
                ledger(beta, date(2024, 5, 1), "income", "5000.00"),
                ledger(beta, date(2024, 6, 1), "income", "6000.00"),
                AccountReceivable(
                    company_id=alpha.id,
                    description="Catering order",
                    amount=Decimal("300.00"),
                    due_date=date(2024, 5, 29),
                    received_date=date(2024, 5, 30),
                    status="received",
                ),
                AccountPayable(
                    company_id=alpha.id,
                    description="Flour",
                    amount=Decimal("100.00"),
                    due_date=date(2024, 5, 31),
                    payment_date=date(2024, 5, 31),
                    status="paid",
                ),
                AccountPayable(
                    company_id=alpha.id,
                    description="Cancelled order",
                    amount=Decimal("70.00"),
                    due_date=date(2024, 5, 31),
                    payment_date=date(2024, 5, 31),
                    status="paid",
                    active=False,
                ),
                AccountPayable(
                    company_id=alpha.id,
                    description="Electricity",
                    amount=Decimal("180.00"),
                    due_date=date(2024, 6, 10),
                    status="pending",
                ),
            ]
        )
        session.commit()
        yield session


def test_company_settings(db):
    store = SqlAlchemyReportStore(db)

    settings = store.get_company_settings(1)

    assert settings.name == "Padaria Alfa"
    assert settings.opex_breakdown == "fixed_ratio"
    assert store.get_company_settings(2).opex_breakdown is None


def test_unknown_company_is_not_found(db):
    with pytest.raises(NotFoundError):
        SqlAlchemyReportStore(db).get_company_settings(999)


@pytest.mark.parametrize("company_id", [0, -3, True, "1", None])
def test_invalid_company_id_is_rejected(db, company_id):
    with pytest.raises(ValidationError):
        SqlAlchemyReportStore(db).list_ledger_entries(company_id, JUNE, Basis.CASH)


def test_ledger_entries_are_scoped_to_company(db):
    store = SqlAlchemyReportStore(db)

    alpha = store.list_ledger_entries(1, JUNE, Basis.CASH)
    beta = store.list_ledger_entries(2, JUNE, Basis.CASH)

    assert [entry.amount for entry in alpha] == [Decimal("40.00"), Decimal("15.00")]
    assert all(entry.company_id == 1 for entry in alpha)
    assert [entry.amount for entry in beta] == [Decimal("6000.00")]


def test_accrual_basis_filters_on_competence_date(db):
    store = SqlAlchemyReportStore(db)

    cash = store.list_ledger_entries(1, MAY, Basis.CASH)
    accrual = store.list_ledger_entries(1, MAY, Basis.ACCRUAL)

    assert Decimal("15.00") not in [entry.amount for entry in cash]
    late = next(entry for entry in accrual if entry.amount == Decimal("15.00"))
    assert late.competence_date == date(2024, 5, 31)
    assert late.type == EntryType.EXPENSE


def test_pending_entries_keep_their_stored_status(db):
    entries = SqlAlchemyReportStore(db).list_ledger_entries(1, MAY, Basis.CASH)

    pending = [entry for entry in entries if entry.status == StoredStatus.PENDING]
    assert [entry.amount for entry in pending] == [Decimal("999.00")]


def test_inactive_payables_are_excluded(db):
    store = SqlAlchemyReportStore(db)

    may = store.list_payables(1, MAY)
    june = store.list_payables(1, JUNE)

    assert [payable.description for payable in may] == ["Flour"]
    assert may[0].paid_date == date(2024, 5, 31)
    assert [payable.description for payable in june] == ["Electricity"]
    assert june[0].status == StoredStatus.PENDING


def test_receivables_and_categories(db):
    store = SqlAlchemyReportStore(db)

    receivables = store.list_receivables(1, MAY)
    categories = store.list_categories(1)

    assert [receivable.received_date for receivable in receivables] == [date(2024, 5, 30)]
    assert [(category.name, category.dre_category) for category in categories] == [
        ("Rent", "operational_expenses"),
        ("Sales", "revenue"),
    ]
    assert store.list_categories(2) == []


def test_opening_balance_counts_movements_filed_before_the_date(db):
    store = SqlAlchemyReportStore(db)

    # 1000 initial + 200 - 50 + 999 ledger + 300 received - 100 paid
    assert store.get_opening_balance(1, date(2024, 6, 1)) == Decimal("2349.00")
    assert store.get_opening_balance(1, date(2024, 1, 1)) == Decimal("0")
    assert store.get_opening_balance(2, date(2024, 6, 1)) == Decimal("5000.00")


def test_accrual_opening_balance_uses_competence_date(db):
    store = SqlAlchemyReportStore(db)

    # The 15.00 expense paid on 2024-06-03 belongs to May on accrual basis.
    assert store.get_opening_balance(1, date(2024, 6, 1), Basis.ACCRUAL) == Decimal("2334.00")
    assert store.get_opening_balance(1, date(2024, 6, 4), Basis.ACCRUAL) == Decimal("2374.00")
    assert store.get_opening_balance(1, date(2024, 6, 4), Basis.CASH) == Decimal("2374.00")


def test_entry_paid_before_its_competence_month_is_counted_once():
    TestingSessionLocal = _session_factory()
    with TestingSessionLocal() as session:
        company = Company(name="Padaria Alfa")
        session.add(company)
        session.flush()
        session.add(ledger(company, date(2024, 5, 31), "income", "100.00", competence=date(2024, 6, 10)))
        session.commit()
        store = SqlAlchemyReportStore(session)

        accrual = service.get_cash_flow(store, company.id, JUNE.start, JUNE.end, basis="accrual", as_of=JUNE.end)
        cash = service.get_cash_flow(store, company.id, JUNE.start, JUNE.end, basis="cash", as_of=JUNE.end)

    assert accrual[0].opening_balance == Decimal("0")
    assert accrual[-1].balance == Decimal("100.00")
    assert cash[0].opening_balance == Decimal("100.00")
    assert cash[-1].balance == Decimal("100.00")


@pytest.mark.parametrize("basis", ["cash", "accrual"])
def test_balance_does_not_depend_on_where_the_range_starts(db, basis):
    store = SqlAlchemyReportStore(db)

    long_run = service.get_cash_flow(store, 1, MAY.start, JUNE.end, basis=basis, as_of=JUNE.end)
    short_run = service.get_cash_flow(store, 1, JUNE.start, JUNE.end, basis=basis, as_of=JUNE.end)

    assert long_run[-1].balance == short_run[-1].balance == Decimal("2194.00")
    boundary = next(point for point in long_run if point.date == JUNE.start)
    assert short_run[0].opening_balance == boundary.opening_balance
    for points in (long_run, short_run):
        net = sum(point.income for point in points) - sum(point.expense for point in points)
        assert net == points[-1].balance - points[0].opening_balance


def test_database_failure_surfaces_as_upstream_error():
    TestingSessionLocal = _session_factory(create_tables=False)
    with TestingSessionLocal() as session:
        store = SqlAlchemyReportStore(session)
        with pytest.raises(UpstreamError):
            store.list_payables(1, JUNE)
