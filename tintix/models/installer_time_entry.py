from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tintix.database import Base


class InstallerTimeEntry(Base):
    __tablename__ = "installer_time_entries"

    id = Column(Integer, primary_key=True, index=True)
    job_entry_id = Column(
        Integer,
        ForeignKey("job_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    installer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    windows_completed = Column(Integer, nullable=False, default=0)
    time_minutes = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    job_entry = relationship("JobEntry", back_populates="time_entries")
    installer = relationship("User")
