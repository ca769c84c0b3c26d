from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from tintix.database import Base


class JobEntry(Base):
    __tablename__ = "job_entries"

    id = Column(Integer, primary_key=True, index=True)
    job_number = Column(String, nullable=False, unique=True)
    date = Column(DateTime, nullable=False, index=True)

    vehicle_year = Column(String, nullable=False)
    vehicle_make = Column(String, nullable=False)
    vehicle_model = Column(String, nullable=False)

    # Snapshots taken at write time; never recomputed from current film pricing.
    total_sqft = Column(Float, nullable=True)
    film_cost = Column(Numeric(10, 2), nullable=True)

    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    dimensions = relationship(
        "JobDimension",
        back_populates="job_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="JobDimension.id",
    )
    installers = relationship(
        "JobInstaller",
        back_populates="job_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="JobInstaller.id",
    )
    redo_entries = relationship(
        "RedoEntry",
        back_populates="job_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RedoEntry.id",
    )
    time_entries = relationship(
        "InstallerTimeEntry",
        back_populates="job_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InstallerTimeEntry.id",
    )
