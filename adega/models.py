"""
SQLAlchemy 2.x models.
- ClientStock is the live ledger: one row per (client, product)
- StockCount is append-only count history tied to a consignment
- Consignment items keep the unit price of the shipment
"""
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Text,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from adega.database import Base

WINE_TYPES = ("tinto", "branco", "rose", "espumante", "fortificado")
CONSIGNMENT_STATUSES = ("pending", "delivered", "completed")
USER_ROLES = ("admin", "manager", "user")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(150), nullable=False)
    country = Column(String(80), nullable=False)
    type = Column(String(20), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    volume = Column(String(20), nullable=False, default="750ml")
    photo = Column(Text)

    __table_args__ = (
        CheckConstraint(f"type IN {WINE_TYPES}", name="ck_products_type"),
    )


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    name = Column(String(150), nullable=False)
    tax_id = Column(String(18), unique=True, nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(20), nullable=False)
    contact_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    consignments = relationship("Consignment", back_populates="client")


class Consignment(Base):
    __tablename__ = "consignments"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    total_value = Column(Numeric(12, 2), nullable=False)

    # Relationships
    client = relationship("Client", back_populates="consignments")
    items = relationship(
        "ConsignmentItem",
        back_populates="consignment",
        cascade="all, delete-orphan",
        order_by="ConsignmentItem.id",
    )

    __table_args__ = (
        CheckConstraint(f"status IN {CONSIGNMENT_STATUSES}", name="ck_consignments_status"),
    )


class ConsignmentItem(Base):
    __tablename__ = "consignment_items"

    id = Column(Integer, primary_key=True)
    consignment_id = Column(Integer, ForeignKey("consignments.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # price at shipment time

    # Relationships
    consignment = relationship("Consignment", back_populates="items")
    product = relationship("Product")


class StockCount(Base):
    __tablename__ = "stock_counts"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    consignment_id = Column(Integer, ForeignKey("consignments.id"), nullable=False)
    quantity_sent = Column(Integer, nullable=False)
    quantity_remaining = Column(Integer, nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_sold = Column(Numeric(12, 2), nullable=False)
    count_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ClientStock(Base):
    __tablename__ = "client_stock"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    minimum_alert = Column(Integer, nullable=False, default=5)
    last_updated = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    client = relationship("Client")
    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("client_id", "product_id", name="uq_client_stock_client_product"),
        CheckConstraint("quantity >= 0", name="ck_client_stock_quantity_non_negative"),
        CheckConstraint("minimum_alert >= 0", name="ck_client_stock_alert_non_negative"),
    )


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint(f"role IN {USER_ROLES}", name="ck_users_role"),
    )
