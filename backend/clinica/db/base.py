from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .session import Base


class User(Base):
    """User model for authentication and ownership of appointments/purchases"""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    # Salted bcrypt hash, never the plain password
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    dni: Mapped[str] = mapped_column(String(20), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user", server_default="user"
    )  # 'user', 'admin'

    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="user", passive_deletes=True
    )
    purchases: Mapped[List["Purchase"]] = relationship(
        back_populates="user", passive_deletes=True
    )

    __table_args__ = (Index("ix_users_email", "email", unique=True),)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


class Doctor(Base):
    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    specialty: Mapped[str] = mapped_column(String(100), nullable=False)
    schedule: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="doctor", passive_deletes=True
    )

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}')>"


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    doctor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    is_cancelled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    user: Mapped["User"] = relationship(back_populates="appointments")
    doctor: Mapped["Doctor"] = relationship(back_populates="appointments")

    __table_args__ = (
        Index("ix_appointments_user_id", "user_id"),
        Index("ix_appointments_doctor_id", "doctor_id"),
    )

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, user_id={self.user_id}, "
            f"doctor_id={self.doctor_id}, date={self.date}, cancelled={self.is_cancelled})>"
        )


class PharmacyProduct(Base):
    """Pharmacy product with stock control"""

    __tablename__ = "pharmacy_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self):
        return f"<PharmacyProduct(id={self.id}, name='{self.name}', stock={self.stock})>"


class Purchase(Base):
    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    purchase_date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    change_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    user: Mapped["User"] = relationship(back_populates="purchases")
    items: Mapped[List["PurchaseItem"]] = relationship(
        back_populates="purchase",
        passive_deletes=True,
        order_by="PurchaseItem.product_name",
    )

    __table_args__ = (Index("ix_purchases_user_id", "user_id"),)

    def __repr__(self):
        return f"<Purchase(id={self.id}, user_id={self.user_id}, total={self.total_amount})>"


class PurchaseItem(Base):
    """Purchase line with a snapshot of the product at sale time"""

    __tablename__ = "purchase_items"

    purchase_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchases.id", ondelete="CASCADE"), primary_key=True
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pharmacy_products.id", ondelete="CASCADE"), primary_key=True
    )
    product_name: Mapped[str] = mapped_column(String(100), nullable=False)
    product_description: Mapped[str] = mapped_column(String(255), nullable=False)
    product_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    purchase: Mapped["Purchase"] = relationship(back_populates="items")

    __table_args__ = (
        Index("ix_purchase_items_purchase_id", "purchase_id"),
        Index("ix_purchase_items_product_id", "product_id"),
    )


class SchemaVersion(Base):
    """Single-row table holding the applied migration number"""

    __tablename__ = "schema_version"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
