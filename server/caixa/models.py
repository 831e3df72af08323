from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    legal_name = Column(String(200), nullable=True)
    cnpj = Column(String(20), nullable=True, unique=True)
    status = Column(String(20), nullable=False, default="active")
    opex_breakdown = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    categories = relationship("Category", back_populates="company")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    type = Column(Enum("income", "expense", name="category_type"), nullable=False)
    dre_category = Column(String(50), nullable=True)
    color = Column(String(20), nullable=True)

    company = relationship("Company", back_populates="categories")

    __table_args__ = (
        UniqueConstraint("company_id", "name", "type", name="uq_category_company_name_type"),
    )


class CashFlowEntry(Base):
    __tablename__ = "cash_flow_entries"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    competence_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    type = Column(Enum("income", "expense", name="cash_flow_type"), nullable=False)
    movement_type = Column(String(30), nullable=False, default="normal")
    description = Column(String(255), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    subcategory_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    gross_amount = Column(Numeric(14, 2), nullable=True)
    fees = Column(Numeric(14, 2), nullable=True)
    payment_method = Column(String(30), nullable=False, default="transfer")
    account = Column(String(100), nullable=False, default="caixa")
    status = Column(
        Enum("confirmed", "pending", "overdue", name="cash_flow_status"),
        nullable=False,
        default="confirmed",
    )
    document = Column(String(100), nullable=True)
    cost_center = Column(String(100), nullable=True)
    recurrence = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    category = relationship("Category", foreign_keys=[category_id])


class AccountPayable(Base):
    __tablename__ = "accounts_payable"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)
    status = Column(
        Enum("pending", "paid", "overdue", name="payable_status"),
        nullable=False,
        default="pending",
    )
    supplier_id = Column(Integer, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    late_fees = Column(Numeric(14, 2), nullable=True)
    discount = Column(Numeric(14, 2), nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class AccountReceivable(Base):
    __tablename__ = "accounts_receivable"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    received_date = Column(Date, nullable=True)
    status = Column(
        Enum("pending", "received", "overdue", name="receivable_status"),
        nullable=False,
        default="pending",
    )
    client_id = Column(Integer, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    late_fees = Column(Numeric(14, 2), nullable=True)
    discount = Column(Numeric(14, 2), nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class BalanceAdjustment(Base):
    __tablename__ = "balance_adjustments"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    balance_type = Column(Enum("initial", "final", name="balance_type"), nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    account = Column(String(100), nullable=False, default="caixa")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
