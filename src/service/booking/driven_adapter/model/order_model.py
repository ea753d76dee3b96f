import uuid
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.db_setting import Base


class OrderModel(Base):
    __tablename__ = 'booking_order'

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    buyer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    lines: Mapped[List['OrderLineModel']] = relationship(
        'OrderLineModel',
        back_populates='order',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='OrderLineModel.id',
        lazy='selectin',
    )


class OrderLineModel(Base):
    __tablename__ = 'booking_order_line'
    __table_args__ = (CheckConstraint('quantity > 0', name='ck_order_line_quantity'),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('booking_order.id', ondelete='CASCADE'), nullable=False, index=True
    )
    item_class_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Price frozen at purchase time; later catalog changes never touch it
    unit_price_at_purchase: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped[OrderModel] = relationship('OrderModel', back_populates='lines')
