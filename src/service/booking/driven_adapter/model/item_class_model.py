from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.db_setting import Base


class ItemClassModel(Base):
    __tablename__ = 'item_class'
    __table_args__ = (
        CheckConstraint('available >= 0 AND available <= total', name='ck_item_class_available'),
        CheckConstraint('unit_price >= 0', name='ck_item_class_unit_price'),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # 'VIP', 'GA', ...
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    available: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
