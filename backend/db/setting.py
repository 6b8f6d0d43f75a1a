from sqlalchemy import Column, DateTime, String
from .database import Base, utcnow

LOW_STOCK_THRESHOLD_KEY = "lowStockThreshold"


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
