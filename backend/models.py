# backend/models.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text,
    ForeignKey, UniqueConstraint, create_engine, text
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
import logging
import os

logger = logging.getLogger(__name__)

# Use persistent volume if available, fallback to local
db_path = "/data/availability.db" if os.path.exists("/data") else "./availability.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{db_path}")

Base = declarative_base()
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

ROLE_TEACHER = "teacher"
ROLE_SCHEDULER = "scheduler"


# ==========================================
# ACCOUNTS
# ==========================================

class Teacher(Base):
    """Portal account. Teachers own a weekly availability; schedulers review everyone's."""
    __tablename__ = "teachers"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False)

    # Authentication
    password_hash = Column(String)
    role = Column(String, nullable=False, default=ROLE_TEACHER)  # teacher, scheduler
    active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    availability_days = relationship(
        "AvailabilityDay",
        back_populates="teacher",
        cascade="all, delete-orphan",
    )

    @property
    def is_scheduler(self) -> bool:
        return self.role == ROLE_SCHEDULER


# ==========================================
# WEEKLY AVAILABILITY
# ==========================================

class AvailabilityDay(Base):
    """One weekday of a teacher's availability, with the teacher's note for that day."""
    __tablename__ = "availability_days"
    __table_args__ = (UniqueConstraint("teacher_id", "day", name="uq_availability_day"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    teacher_id = Column(String, ForeignKey("teachers.id"), nullable=False, index=True)
    day = Column(String, nullable=False)  # Monday..Sunday
    note = Column(Text, default="")

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teacher = relationship("Teacher", back_populates="availability_days")
    blocks = relationship(
        "TimeBlock",
        back_populates="availability_day",
        cascade="all, delete-orphan",
        order_by="TimeBlock.start_time",
    )


class TimeBlock(Base):
    """A [start, end) block inside a day. Times are stored as HH:MM strings."""
    __tablename__ = "time_blocks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    day_id = Column(Integer, ForeignKey("availability_days.id"), nullable=False, index=True)

    # Id the editors use; kept across re-saves so selections stay stable
    interval_id = Column(String, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    availability_day = relationship("AvailabilityDay", back_populates="blocks")


# ==========================================
# DATABASE INITIALIZATION
# ==========================================

def init_db():
    """Initialize database with tables and optimizations"""
    logger.info("[Database] Creating tables and indexes...")
    Base.metadata.create_all(bind=engine)

    if not DATABASE_URL.startswith("sqlite"):
        return

    try:
        with engine.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.execute(text("""
                CREATE INDEX IF NOT EXISTS idx_teachers_role ON teachers(role)
            """))
            conn.execute(text("""
                CREATE INDEX IF NOT EXISTS idx_time_blocks_day_start
                ON time_blocks(day_id, start_time)
            """))
            conn.execute(text("ANALYZE"))
            conn.commit()
        logger.info("[Database] Initialization complete with optimizations")
    except Exception as e:
        logger.warning(f"[Database] Could not apply optimizations: {e}")


def get_db():
    """Dependency for FastAPI endpoints"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
