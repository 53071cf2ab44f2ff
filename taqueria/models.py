"""
SQLAlchemy Database Models

Catalog storage for the ordering system:
- Categories with their ingredient catalogs
- Menu items
- Placed orders (line items frozen as JSON)
- Opaque key/value settings (branding, theme, item order)
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, JSON
from sqlalchemy.sql import func

from taqueria.database import Base


class Category(Base):
    """
    Menu category.

    `name` is the slug derived from `translation` and is what menu items
    reference. `ingredients` holds the category's ingredient catalog as a
    list of {id, name, isDefault, price} objects.
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    translation = Column(String(100), nullable=False)
    icon = Column(String(30), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    ingredients = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<Category #{self.id} - {self.name} - order {self.order}>"


class MenuItem(Base):
    """A dish or drink offered under a category."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    translation = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)

    # Optional choice lists
    meats = Column(JSON, nullable=True)
    sizes = Column(JSON, nullable=True)
    ingredients = Column(JSON, nullable=True)  # legacy free-text form, "Guacamole (+$2)"

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.category} - {self.name}>"


class Order(Base):
    """
    Placed order.

    Items are copies of the cart lines at checkout time, so later menu
    edits never alter a placed order. Only `status` changes afterwards.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(String(50), nullable=False, unique=True, index=True)
    phone = Column(String(30), nullable=False, index=True)
    items = Column(JSON, nullable=False)
    instructions = Column(Text, nullable=True)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="received", index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    estimated_time = Column(Integer, nullable=True, default=20)

    def __repr__(self):
        return f"<Order {self.order_id} - {self.phone} - {self.status}>"


class Setting(Base):
    """Opaque key/value pair."""
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)

    def __repr__(self):
        return f"<Setting {self.key}>"
