import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from categories import Category, category_color

Base = declarative_base()


def _uuid():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    time_blocks = relationship("TimeBlock", back_populates="user", cascade="all, delete-orphan")
    daily_logs = relationship("DailyLog", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email}


class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(String(20), default=Category.GENERAL.value, nullable=False)
    priority = Column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="tasks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "is_completed": self.is_completed,
            "date": self.date.isoformat(),
            "category": self.category,
            "color": category_color(self.category),
            "priority": self.priority,
        }


class TimeBlock(Base):
    __tablename__ = "time_blocks"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    # [start_time, end_time)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    label = Column(Text, nullable=False)
    category = Column(String(20), default=Category.WORK.value, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="time_blocks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "label": self.label,
            "category": self.category,
            "color": category_color(self.category),
            "is_completed": self.is_completed,
        }


class DailyLog(Base):
    __tablename__ = "daily_logs"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_logs_user_date"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    consistency_score = Column(Integer, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    tasks_completed = Column(Integer, default=0, nullable=False)
    tasks_total = Column(Integer, default=0, nullable=False)
    blocks_completed = Column(Integer, default=0, nullable=False)
    blocks_total = Column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="daily_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "consistency_score": self.consistency_score,
            "notes": self.notes,
            "tasks_completed": self.tasks_completed,
            "tasks_total": self.tasks_total,
            "blocks_completed": self.blocks_completed,
            "blocks_total": self.blocks_total,
        }
