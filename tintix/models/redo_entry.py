from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from tintix.database import Base


class RedoPart(str, Enum):
    WINDSHIELD = "windshield"
    BACK_WINDSHIELD = "back_windshield"
    ROLLUPS = "rollups"
    QUARTER = "quarter"


class RedoEntry(Base):
    __tablename__ = "redo_entries"

    __table_args__ = (
        CheckConstraint(
            "part IN ('windshield', 'back_windshield', 'rollups', 'quarter')",
            name="ck_redo_entries_part",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_entry_id = Column(
        Integer,
        ForeignKey("job_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    installer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    part = Column(String, nullable=False, index=True)

    length_inches = Column(Float, nullable=True)
    width_inches = Column(Float, nullable=True)
    sqft = Column(Float, nullable=True)
    film_id = Column(Integer, ForeignKey("films.id"), nullable=True)
    material_cost = Column(Numeric(10, 2), nullable=True)
    time_minutes = Column(Integer, nullable=True, default=0)

    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    job_entry = relationship("JobEntry", back_populates="redo_entries")
    installer = relationship("User")
