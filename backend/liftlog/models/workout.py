from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Integer, ForeignKey, String, Text, DateTime, Numeric, JSON,
    UniqueConstraint, Enum as SAEnum, func,
)
from liftlog.db import Base
from liftlog.models.enums import Visibility
from liftlog.timeutil import utcnow

def is_completed(reps, weight_kg, rpe) -> bool:
    """A set counts as performed once any performance field is filled in."""
    return reps is not None or weight_kg is not None or rpe is not None

def exercise_key(exercise_id: int | None, custom_exercise_name: str | None) -> str:
    """Grouping key for sets: the catalog id or the custom name."""
    if exercise_id is not None:
        return f"db:{exercise_id}"
    return f"custom:{custom_exercise_name}"

class Workout(Base):
    __tablename__ = "workouts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    routine_id: Mapped[int | None] = mapped_column(
        ForeignKey("routines.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    visibility: Mapped[Visibility] = mapped_column(
        SAEnum(Visibility, name="visibility", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Visibility.private,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="workouts")
    routine = relationship("Routine")
    sets = relationship(
        "WorkoutSet",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by=lambda: (WorkoutSet.exercise_key, WorkoutSet.set_number),
    )

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

class WorkoutSet(Base):
    __tablename__ = "workout_sets"
    __table_args__ = (
        UniqueConstraint("workout_id", "exercise_key", "set_number", name="uq_workout_exercise_set"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), index=True)
    exercise_id: Mapped[int | None] = mapped_column(ForeignKey("exercises.id"), nullable=True)
    custom_exercise_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    custom_exercise_category: Mapped[str | None] = mapped_column(String(60), nullable=True)
    custom_exercise_primary_muscles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    exercise_key: Mapped[str] = mapped_column(String(220), nullable=False)
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    rpe: Mapped[float | None] = mapped_column(Numeric(3, 1, asdecimal=False), nullable=True)
    duration_sec: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    performed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    workout = relationship("Workout", back_populates="sets")
    exercise = relationship("Exercise", lazy="joined")

    @property
    def completed(self) -> bool:
        return is_completed(self.reps, self.weight_kg, self.rpe)

    @property
    def exercise_name(self) -> str:
        if self.exercise is not None:
            return self.exercise.name
        return self.custom_exercise_name or "Unknown"
