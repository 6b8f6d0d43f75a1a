import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship
from .database import Base, utcnow

ADD_ONS_CATEGORY = "add-ons"


class MenuItem(Base):
    """Menu item with its base recipe (ingredients referenced by inventory name)"""
    __tablename__ = "menu_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, index=True)  # regular categories | 'add-ons'
    image = Column(String, nullable=True)  # filename only
    created_at = Column(DateTime, default=utcnow, nullable=False)

    ingredients = relationship(
        "RecipeIngredient",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.sort_order",
        lazy="selectin",
    )

    @property
    def is_add_on(self) -> bool:
        return self.category == ADD_ONS_CATEGORY

    @property
    def to_schema(self):
        """Convert MenuItem model to schema dictionary format"""
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price) if self.price is not None else 0.0,
            "category": self.category,
            "image": self.image,
            "created_at": self.created_at,
            "ingredients": [
                {"inventory_item": ri.inventory_item, "quantity": float(ri.quantity)}
                for ri in self.ingredients
            ],
        }


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    menu_item_id = Column(Uuid, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)

    # Join to InventoryItem.name, not to its id
    inventory_item = Column(String, nullable=False)
    quantity = Column(Numeric(10, 3), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    menu_item = relationship("MenuItem", back_populates="ingredients")
