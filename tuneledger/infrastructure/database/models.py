"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from tuneledger.core.clock import utcnow
from tuneledger.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (CheckConstraint("balance_cents >= 0", name="balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True)
    contact_name = Column(String(255))
    company_name = Column(String(255))
    role = Column(String(20), nullable=False, default="client")
    is_active = Column(Boolean, nullable=False, default=True)
    balance_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    # autoincrement id doubles as the replay order
    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    kind = Column(String(32), nullable=False)  # purchase_credit, job_debit, refund, admin_adjustment
    amount_cents = Column(Integer, nullable=False)
    balance_before_cents = Column(Integer, nullable=False)
    balance_after_cents = Column(Integer, nullable=False)
    job_ref = Column(String(36), ForeignKey("jobs.id"), nullable=True, index=True)
    external_ref = Column(String(255), nullable=True, unique=True)
    description = Column(String(255))
    processed_by = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class ServiceCatalogItem(Base):
    __tablename__ = "service_catalog"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    code = Column(String(64), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    price_cents = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (Index("ix_jobs_status", "status"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    reference_number = Column(String(32), unique=True, nullable=False)
    owner_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    assigned_admin_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    job_type = Column(String(10), nullable=False, default="ecu")

    vehicle_brand = Column(String(100), nullable=False)
    vehicle_model = Column(String(100), nullable=False)
    vehicle_year = Column(String(20), nullable=False)
    engine_type = Column(String(100), nullable=False)
    engine_power_hp = Column(Integer)
    ecu_type = Column(String(100))
    tcu_type = Column(String(100))
    gearbox_type = Column(String(100))
    vin = Column(String(32))
    mileage = Column(Integer)
    fuel_type = Column(String(50))

    credits_used_cents = Column(Integer, nullable=False, default=0)
    client_notes = Column(Text)
    admin_notes = Column(Text)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    revision_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    priced_items = relationship(
        "JobPricedItem",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobPricedItem.position",
        lazy="selectin",
    )


class JobPricedItem(Base):
    __tablename__ = "job_priced_items"
    __table_args__ = (UniqueConstraint("job_id", "code", name="uq_job_priced_items_job_code"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    code = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    price_cents = Column(Integer, nullable=False)

    job = relationship("Job", back_populates="priced_items")


class Message(Base):
    __tablename__ = "job_messages"
    __table_args__ = (Index("ix_job_messages_job_created", "job_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    job_id = Column(String(36), ForeignKey("jobs.id"), nullable=False)
    sender_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    body = Column(Text, nullable=False)
    internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class PaymentEventLog(Base):
    __tablename__ = "payment_event_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_ref = Column(String(255), nullable=False, index=True)
    event_type = Column(String(64), nullable=False)
    account_id = Column(String(36))
    amount_cents = Column(Integer)
    outcome = Column(String(32), nullable=False)  # credited, duplicate, ignored
    received_at = Column(DateTime, nullable=False, default=utcnow)
