"""SlotCounter ORM model: the per-slot reservation counter behind atomic admission."""
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String

from volunteer_slots.database import Base


class SlotCounter(Base):
    __tablename__ = "slot_counters"
    __table_args__ = (CheckConstraint("reserved >= 0", name="ck_slot_counters_reserved_non_negative"),)

    project_id = Column(String(36), ForeignKey("projects.project_id", ondelete="CASCADE"), primary_key=True)
    schedule_id = Column(String(255), primary_key=True)
    reserved = Column(Integer, nullable=False, default=0)
