from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship, validates

from models.base_model import BaseModel, Base

STATUS_OPEN = "OPEN"
STATUS_DONE = "DONE"
TASK_STATUSES = (STATUS_OPEN, STATUS_DONE)


class Task(BaseModel, Base):
    __tablename__ = "tasks"

    title = Column(String(255), nullable=False)
    # casefolded copy of title for searching; SQLite lower() only folds ASCII
    title_folded = Column(String(1020), nullable=False, default="")
    description = Column(Text, nullable=True)
    status = Column(String(4), nullable=False, default=STATUS_OPEN)

    # Owner: tasks go away with their user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="tasks")

    __table_args__ = (
        CheckConstraint("status IN ('OPEN', 'DONE')", name="ck_tasks_status"),
        Index("ix_tasks_user_created", "user_id", "created_at"),
    )

    @validates("title")
    def _fold_title(self, key, value):
        self.title_folded = value.casefold() if value is not None else ""
        return value

    def toggle(self):
        """Flip OPEN <-> DONE."""
        self.status = STATUS_DONE if self.status == STATUS_OPEN else STATUS_OPEN
