"""SQLAlchemy models for switchbooks database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Company(Base):
    """Company (tenant) model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    categories = relationship("Category", back_populates="company", cascade="all, delete-orphan")
    payees = relationship("Payee", back_populates="company", cascade="all, delete-orphan")


class Category(Base):
    """Chart-of-accounts model with hierarchical structure."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String(255), nullable=False)
    account_type = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    company = relationship("Company", back_populates="categories")
    parent = relationship("Category", remote_side=[id], backref="children")


class Payee(Base):
    """Payee model."""

    __tablename__ = "payees"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_company_payee_name"),)

    # Relationships
    company = relationship("Company", back_populates="payees")


class Transaction(Base):
    """Bank transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    bank_account_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    payee_id = Column(Integer, ForeignKey("payees.id"), nullable=True)
    status = Column(String, default="imported", nullable=False)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    journal_lines = relationship(
        "JournalLine", back_populates="transaction", cascade="all, delete-orphan"
    )


class JournalLine(Base):
    """Journal line model, one side of a posted transaction."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    side = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)

    # Relationships
    transaction = relationship("Transaction", back_populates="journal_lines")


class ManualJournalLine(Base):
    """Manual journal entry line model; lines of one entry share a reference."""

    __tablename__ = "manual_journal_lines"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    reference = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    side = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    payee_id = Column(Integer, ForeignKey("payees.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class AutomationRule(Base):
    """Automation rule model."""

    __tablename__ = "automation_rules"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    name = Column(String, nullable=False)
    automation_type = Column(String, nullable=False)
    condition_type = Column(String, nullable=False)
    condition_value = Column(String, nullable=False)
    action_value = Column(String, nullable=False)
    auto_add = Column(Boolean, default=False, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
