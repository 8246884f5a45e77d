"""SQLAlchemy models for covtrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Facility(Base):
    """Credit facility model."""

    __tablename__ = "compliance_facilities"

    id = Column(Integer, primary_key=True)
    facility_name = Column(String, unique=True, nullable=False)
    borrower_name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    obligations = relationship("Obligation", back_populates="facility", cascade="all, delete-orphan")
    covenants = relationship("Covenant", back_populates="facility", cascade="all, delete-orphan")


class Obligation(Base):
    """Reporting obligation model."""

    __tablename__ = "compliance_obligations"

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey("compliance_facilities.id"), nullable=False)
    name = Column(String, nullable=False)
    obligation_type = Column(String, nullable=False, default="other")
    frequency = Column(String, nullable=False)
    deadline_days = Column(Integer, nullable=False, default=90)
    grace_period_days = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    facility = relationship("Facility", back_populates="obligations")
    events = relationship("ComplianceEvent", back_populates="obligation", cascade="all, delete-orphan")


class ComplianceEvent(Base):
    """Compliance event (deadline instance) model."""

    __tablename__ = "compliance_events"

    id = Column(Integer, primary_key=True)
    facility_id = Column(Integer, ForeignKey("compliance_facilities.id"), nullable=False)
    obligation_id = Column(Integer, ForeignKey("compliance_obligations.id"), nullable=False)
    reference_period_start = Column(Date, nullable=False)
    reference_period_end = Column(Date, nullable=False)
    deadline_date = Column(Date, nullable=False)
    grace_deadline_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="upcoming")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One event per obligation and reporting period
    __table_args__ = (
        UniqueConstraint("obligation_id", "reference_period_start", name="uq_obligation_period"),
    )

    # Relationships
    obligation = relationship("Obligation", back_populates="events")


class Covenant(Base):
    """Financial covenant model.

    The threshold schedule is stored as a JSON list of
    ``{"effective_from": "YYYY-MM-DD", "threshold_value": "4.25"}`` entries.
    """

    __tablename__ = "compliance_covenants"

    id = Column(String, primary_key=True)
    facility_id = Column(Integer, ForeignKey("compliance_facilities.id"), nullable=False)
    name = Column(String, nullable=False)
    covenant_type = Column(String, nullable=False, default="other")
    threshold_type = Column(String, nullable=False, default="maximum")
    threshold_schedule = Column(JSON, nullable=True)
    testing_frequency = Column(String, nullable=False, default="quarterly")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    facility = relationship("Facility", back_populates="covenants")
    tests = relationship("CovenantTest", back_populates="covenant", cascade="all, delete-orphan")


class CovenantTest(Base):
    """Covenant test result model."""

    __tablename__ = "covenant_tests"

    id = Column(Integer, primary_key=True)
    covenant_id = Column(String, ForeignKey("compliance_covenants.id"), nullable=False)
    facility_id = Column(Integer, ForeignKey("compliance_facilities.id"), nullable=False)
    test_date = Column(Date, nullable=False)
    calculated_ratio = Column(Numeric(18, 6), nullable=True)
    threshold_value = Column(Numeric(18, 6), nullable=False)
    test_result = Column(String, nullable=False, default="pass")
    headroom_absolute = Column(Numeric(18, 6), nullable=True)
    headroom_percentage = Column(Numeric(10, 2), nullable=True)
    breach_amount = Column(Numeric(18, 6), nullable=True)
    notes = Column(String, nullable=True)
    source = Column(String, nullable=False, default="manual")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    covenant = relationship("Covenant", back_populates="tests")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
