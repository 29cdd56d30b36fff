from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, JSON
from liftlog.db import Base

class Exercise(Base):
    """Catalog exercise. Rows are imported/seeded; the app only reads them."""
    __tablename__ = "exercises"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(60), nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(60), nullable=True)
    primary_muscles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    secondary_muscles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
