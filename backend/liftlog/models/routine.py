from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, String, Text, DateTime, UniqueConstraint, Enum as SAEnum, func
from liftlog.db import Base
from liftlog.models.enums import Visibility

class Routine(Base):
    __tablename__ = "routines"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[Visibility] = mapped_column(
        SAEnum(Visibility, name="visibility", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Visibility.private,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    author = relationship("User", back_populates="routines")
    routine_exercises = relationship(
        "RoutineExercise",
        back_populates="routine",
        cascade="all, delete-orphan",
        order_by=lambda: (RoutineExercise.day_index, RoutineExercise.order_index),
    )

class RoutineExercise(Base):
    __tablename__ = "routine_exercises"
    __table_args__ = (
        UniqueConstraint("routine_id", "day_index", "order_index", name="uq_routine_day_order"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    routine_id: Mapped[int] = mapped_column(ForeignKey("routines.id", ondelete="CASCADE"), index=True)
    exercise_id: Mapped[int | None] = mapped_column(ForeignKey("exercises.id"), nullable=True)
    custom_exercise_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    day_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Free text on purpose: "3", "3-4", "AMRAP", "To failure"
    sets: Mapped[str | None] = mapped_column(String(40), nullable=True)
    reps: Mapped[str | None] = mapped_column(String(40), nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    routine = relationship("Routine", back_populates="routine_exercises")
    exercise = relationship("Exercise", lazy="joined")
