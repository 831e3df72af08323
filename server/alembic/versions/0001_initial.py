"""reporting tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("legal_name", sa.String(length=200)),
        sa.Column("cnpj", sa.String(length=20), unique=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("opex_breakdown", sa.String(length=20)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.Enum("income", "expense", name="category_type"), nullable=False),
        sa.Column("dre_category", sa.String(length=50)),
        sa.Column("color", sa.String(length=20)),
        sa.UniqueConstraint("company_id", "name", "type", name="uq_category_company_name_type"),
    )
    op.create_index("ix_categories_company_id", "categories", ["company_id"])
    op.create_table(
        "cash_flow_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("competence_date", sa.Date()),
        sa.Column("due_date", sa.Date()),
        sa.Column("type", sa.Enum("income", "expense", name="cash_flow_type"), nullable=False),
        sa.Column("movement_type", sa.String(length=30), nullable=False, server_default="normal"),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id")),
        sa.Column("subcategory_id", sa.Integer(), sa.ForeignKey("categories.id")),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("gross_amount", sa.Numeric(14, 2)),
        sa.Column("fees", sa.Numeric(14, 2)),
        sa.Column("payment_method", sa.String(length=30), nullable=False, server_default="transfer"),
        sa.Column("account", sa.String(length=100), nullable=False, server_default="caixa"),
        sa.Column(
            "status",
            sa.Enum("confirmed", "pending", "overdue", name="cash_flow_status"),
            nullable=False,
            server_default="confirmed",
        ),
        sa.Column("document", sa.String(length=100)),
        sa.Column("cost_center", sa.String(length=100)),
        sa.Column("recurrence", sa.String(length=20)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cash_flow_entries_company_id", "cash_flow_entries", ["company_id"])
    op.create_index("ix_cash_flow_entries_date", "cash_flow_entries", ["date"])
    op.create_table(
        "accounts_payable",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("payment_date", sa.Date()),
        sa.Column(
            "status",
            sa.Enum("pending", "paid", "overdue", name="payable_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("supplier_id", sa.Integer()),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id")),
        sa.Column("late_fees", sa.Numeric(14, 2)),
        sa.Column("discount", sa.Numeric(14, 2)),
        sa.Column("notes", sa.Text()),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_accounts_payable_company_id", "accounts_payable", ["company_id"])
    op.create_table(
        "accounts_receivable",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("received_date", sa.Date()),
        sa.Column(
            "status",
            sa.Enum("pending", "received", "overdue", name="receivable_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("client_id", sa.Integer()),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id")),
        sa.Column("late_fees", sa.Numeric(14, 2)),
        sa.Column("discount", sa.Numeric(14, 2)),
        sa.Column("notes", sa.Text()),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_accounts_receivable_company_id", "accounts_receivable", ["company_id"])
    op.create_table(
        "balance_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("balance_type", sa.Enum("initial", "final", name="balance_type"), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("account", sa.String(length=100), nullable=False, server_default="caixa"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_balance_adjustments_company_id", "balance_adjustments", ["company_id"])


def downgrade() -> None:
    op.drop_index("ix_balance_adjustments_company_id", table_name="balance_adjustments")
    op.drop_table("balance_adjustments")
    op.drop_index("ix_accounts_receivable_company_id", table_name="accounts_receivable")
    op.drop_table("accounts_receivable")
    op.drop_index("ix_accounts_payable_company_id", table_name="accounts_payable")
    op.drop_table("accounts_payable")
    op.drop_index("ix_cash_flow_entries_date", table_name="cash_flow_entries")
    op.drop_index("ix_cash_flow_entries_company_id", table_name="cash_flow_entries")
    op.drop_table("cash_flow_entries")
    op.drop_index("ix_categories_company_id", table_name="categories")
    op.drop_table("categories")
    op.drop_table("companies")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_name in (
            "balance_type",
            "receivable_status",
            "payable_status",
            "cash_flow_status",
            "cash_flow_type",
            "category_type",
        ):
            op.execute(sa.text(f"DROP TYPE IF EXISTS {enum_name}"))
