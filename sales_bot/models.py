from datetime import date

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

ORDER_STATUSES = ("pendiente", "aprobado", "empacado", "despachado", "cancelado")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, nullable=False, unique=True, index=True)  # catalog SKU, e.g. "BOL812N"
    description = Column(String, nullable=False)
    stock = Column(Float, nullable=False, default=0.0)
    price = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False, index=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    created_on = Column(Date, nullable=False, default=date.today)

    # Operator who built the order in the chat
    chat_user_id = Column(Integer, nullable=True, index=True)
    chat_username = Column(String, nullable=True)
    chat_display_name = Column(String, nullable=True)

    raw_input = Column(Text, nullable=True)  # every product list the operator typed
    client_name = Column(String, nullable=False)
    client_id = Column(Integer, nullable=True)
    products_text = Column(Text, nullable=False, default="")  # "qty description" per line
    products_json = Column(Text, nullable=False, default="[]")
    notes = Column(Text, nullable=True)

    status = Column(String, nullable=False, default="pendiente", index=True)  # see ORDER_STATUSES
    total = Column(Float, nullable=False, default=0.0)
    subtotal = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )
