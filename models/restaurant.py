from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Table, CheckConstraint
from sqlalchemy.orm import relationship
from core.db import Base
from core.utils import utcnow


restaurant_categories = Table(
    "restaurant_categories",
    Base.metadata,
    Column("restaurant_id", Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Restaurant(Base):
    __tablename__ = "restaurants"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_restaurants_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    note = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)  # None means unrated
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    categories = relationship("Category", secondary=restaurant_categories, back_populates="restaurants")
    images = relationship("Image", back_populates="restaurant", order_by="Image.order", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Restaurant {self.id}: {self.name}>"
