from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from tintix.database import Base

TRANSACTION_TYPES = ("addition", "deduction", "adjustment")


class InventoryTransaction(Base):
    """Append-only stock ledger row. Never updated after insert."""

    __tablename__ = "inventory_transactions"

    __table_args__ = (
        CheckConstraint(
            "type IN ('addition', 'deduction', 'adjustment')",
            name="ck_inventory_transactions_type",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    film_id = Column(Integer, ForeignKey("films.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    previous_stock = Column(Numeric(10, 2), nullable=False)
    new_stock = Column(Numeric(10, 2), nullable=False)
    job_entry_id = Column(Integer, ForeignKey("job_entries.id", ondelete="SET NULL"), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    film = relationship("Film")
