# models/image.py
from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from core.db import Base


class Image(Base):
    __tablename__ = "images"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "order", name="uq_images_restaurant_order"),
        CheckConstraint('"order" >= 1 AND "order" <= 5', name="ck_images_order_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String, nullable=False)  # storage locator, e.g. /uploads/1700000000000-0-cover.jpg
    order = Column(Integer, nullable=False)  # slot 1..5, slot 1 is the cover
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)

    restaurant = relationship("Restaurant", back_populates="images")

    def __repr__(self):
        return f"<Image {self.id} slot={self.order} restaurant={self.restaurant_id}>"
