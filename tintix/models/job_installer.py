from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from tintix.database import Base


class JobInstaller(Base):
    __tablename__ = "job_installers"

    id = Column(Integer, primary_key=True, index=True)
    job_entry_id = Column(
        Integer,
        ForeignKey("job_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    installer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    time_variance = Column(Integer, nullable=False)  # signed minutes vs target
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    job_entry = relationship("JobEntry", back_populates="installers")
    installer = relationship("User")
