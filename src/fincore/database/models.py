"""SQLAlchemy models for the fincore database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    ForeignKeyConstraint,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Financial account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    company_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False, default="BANK")
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)
    bank_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_account_company_name"),)


class Category(Base):
    """Financial category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    company_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    linked_account_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class CostCenter(Base):
    """Cost center model."""

    __tablename__ = "cost_centers"

    id = Column(String(36), primary_key=True, default=_new_id)
    company_id = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class Transaction(Base):
    """Transaction model.

    ``category_id`` carries no foreign key: deleting a category must leave
    its transactions in place (they fall back to ``category_name``).
    ``status`` is a copy of the status derived from the payments, kept for
    querying.
    """

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    company_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    kind = Column(String, nullable=False)
    status = Column(String, nullable=False)
    category_id = Column(String, nullable=True)
    category_name = Column(String, nullable=True)
    description = Column(String, nullable=False, default="")
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    cost_center_id = Column(String(36), ForeignKey("cost_centers.id"), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    payments = relationship(
        "Payment",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="Payment.position",
    )


class Payment(Base):
    """Payment model, owned by exactly one transaction."""

    __tablename__ = "payments"

    pk = Column(Integer, primary_key=True)
    transaction_id = Column(String(36), ForeignKey("transactions.id"), nullable=False)
    position = Column(Integer, nullable=False)
    payment_key = Column(String, nullable=False)
    method = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    installment_number = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="payments")


class StatementTemplate(Base):
    """Statement template model."""

    __tablename__ = "statement_templates"

    id = Column(String(36), primary_key=True, default=_new_id)
    company_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    is_system_default = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    lines = relationship(
        "StatementLine",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="StatementLine.order_index",
    )


class StatementLine(Base):
    """Statement line model; ``line_id`` is unique within its template."""

    __tablename__ = "statement_lines"

    template_id = Column(String(36), ForeignKey("statement_templates.id"), primary_key=True)
    line_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    order_index = Column(Integer, nullable=False)
    formula = Column(String, nullable=True)

    # Relationships
    template = relationship("StatementTemplate", back_populates="lines")
    mappings = relationship(
        "LineMapping",
        back_populates="line",
        cascade="all, delete-orphan",
        order_by="LineMapping.position",
    )


class LineMapping(Base):
    """Mapping of a statement line to a category or account."""

    __tablename__ = "line_mappings"

    pk = Column(Integer, primary_key=True)
    template_id = Column(String(36), nullable=False)
    line_id = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    target_kind = Column(String, nullable=False)
    target_id = Column(String, nullable=False)
    operation = Column(String, nullable=False, default="ADD")

    __table_args__ = (
        ForeignKeyConstraint(
            ["template_id", "line_id"],
            ["statement_lines.template_id", "statement_lines.line_id"],
        ),
    )

    # Relationships
    line = relationship("StatementLine", back_populates="mappings")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
