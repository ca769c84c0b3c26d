from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from tintix.database import Base


class JobDimension(Base):
    __tablename__ = "job_dimensions"

    id = Column(Integer, primary_key=True, index=True)
    job_entry_id = Column(
        Integer,
        ForeignKey("job_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    film_id = Column(Integer, ForeignKey("films.id"), nullable=True, index=True)
    length_inches = Column(Numeric(8, 2), nullable=False)
    width_inches = Column(Numeric(8, 2), nullable=False)
    sqft = Column(Numeric(10, 4), nullable=False)  # length_inches * width_inches / 144
    film_cost = Column(Numeric(10, 2), nullable=True)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    job_entry = relationship("JobEntry", back_populates="dimensions")
    film = relationship("Film")
