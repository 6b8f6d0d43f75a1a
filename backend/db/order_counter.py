from sqlalchemy import Column, Integer, String
from .database import Base


class OrderCounter(Base):
    """Named monotonic sequence; order codes are drawn from the 'sales' row"""
    __tablename__ = "order_counters"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
