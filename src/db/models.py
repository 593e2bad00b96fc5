"""
Database models for the food order pipeline.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class FoodOrder(Base):
    """Order table, augmented in place with the derived financial columns."""
    __tablename__ = 'food'

    id = Column(Integer, primary_key=True, autoincrement=True)
    Order_ID = Column(Integer, index=True)
    Order_Value = Column(Float)
    Commission_Fee = Column(Float)
    Delivery_Fee = Column(Float)
    Payment_Processing_Fee = Column(Float)
    Order_Date_and_Time = Column(DateTime)
    Discounts_and_Offers = Column(String(100))
    Payment_Method = Column(String(50))

    # Derived columns
    Discount_Value = Column(Float)
    Discount_Type = Column(String(20))
    Discount_Amount = Column(Float)
    Total_Costs = Column(Float)
    Revenue = Column(Float)
    Profit = Column(Float)
    Commission_Percentage = Column(Float)
    Effective_Discount_Percentage = Column(Float)


class FoodOrderSimulation(Base):
    """One simulated outcome per order under fixed commission/discount rates."""
    __tablename__ = 'food_orders_simulation'

    OrderID = Column(Integer, primary_key=True, autoincrement=False)
    OrderValue = Column(Float)
    Simulated_Commission_Fee = Column(Float)
    Simulated_Discount_Amount = Column(Float)
    Simulated_Total_Costs = Column(Float)
    Simulated_Profit = Column(Float)


def table_columns(model):
    """Column names of a model's table, without surrogate keys."""
    return [column.name for column in model.__table__.columns if column.name != 'id']
