from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from tintix.database import Base


class Film(Base):
    __tablename__ = "films"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False)
    cost_per_sqft = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    inventory = relationship(
        "FilmInventory",
        back_populates="film",
        uselist=False,
        cascade="all, delete-orphan",
    )


class FilmInventory(Base):
    __tablename__ = "film_inventory"

    id = Column(Integer, primary_key=True, index=True)
    film_id = Column(
        Integer,
        ForeignKey("films.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    current_stock = Column(Numeric(10, 2), nullable=False, default=0)
    minimum_stock = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    film = relationship("Film", back_populates="inventory")
