from sqlalchemy import String, Integer, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base

TYPES = ("room", "cottage", "whole")
STATUSES = ("Active", "Inactive")

class Accommodation(Base):
    __tablename__ = "accommodations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str] = mapped_column(String(20), index=True)  # room, cottage, whole
    package_type: Mapped[str] = mapped_column(String(40), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    capacity: Mapped[int] = mapped_column(Integer, default=0)

    day_price: Mapped[int] = mapped_column(Integer, default=0)
    overnight_price: Mapped[int] = mapped_column(Integer, default=0)
    whole_resort_price: Mapped[int] = mapped_column(Integer, default=0)

    amenities: Mapped[list] = mapped_column(JSON, default=list)
    features: Mapped[list] = mapped_column(JSON, default=list)
    image: Mapped[str] = mapped_column(String(512), default="")  # URL, never fetched server-side

    status: Mapped[str] = mapped_column(String(20), default="Active")  # Active, Inactive
