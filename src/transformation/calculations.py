"""
Business metrics calculations for the food order pipeline.
"""
import logging
import traceback
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def _or_zero(value):
    if value is None or pd.isna(value):
        return 0.0
    return value


def calculate_order_financials(commission_fee, delivery_fee, processing_fee, discount_amount):
    """
    Compute total costs, revenue and profit for a single order.

    Null fees count as zero. Profit is rounded to 2 decimals.
    """
    total_costs = _or_zero(delivery_fee) + _or_zero(processing_fee) + _or_zero(discount_amount)
    revenue = _or_zero(commission_fee)
    return {
        'Total_Costs': total_costs,
        'Revenue': revenue,
        'Profit': float(np.round(revenue - total_costs, 2))
    }


def percentage_of(numerator, order_value):
    """
    Express numerator as a percentage of order value, rounded to 2 decimals.

    Returns None when the order value is null or zero.
    """
    if order_value is None or pd.isna(order_value) or order_value == 0:
        return None
    if numerator is None or pd.isna(numerator):
        return None
    return float(np.round(numerator * 100.0 / order_value, 2))


def add_financial_metrics(df):
    """
    Add Total_Costs, Revenue and Profit columns.
    """
    try:
        logger.info("Calculating financial metrics")

        df = df.copy()
        df['Total_Costs'] = (
            df['Delivery_Fee'].fillna(0)
            + df['Payment_Processing_Fee'].fillna(0)
            + df['Discount_Amount'].fillna(0)
        )
        df['Revenue'] = df['Commission_Fee'].fillna(0)
        df['Profit'] = (df['Revenue'] - df['Total_Costs']).round(2)

        logger.info(f"Calculated financial metrics for {len(df)} orders")
        return df
    except Exception as e:
        logger.error(f"Error calculating financial metrics: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def _percentage_series(numerator, order_value):
    valid = order_value.notna() & (order_value != 0)
    # avoid evaluating the division where it is undefined
    safe_value = order_value.where(valid, np.nan)
    return (numerator * 100.0 / safe_value).round(2).where(valid, np.nan)


def add_percentage_metrics(df):
    """
    Add Commission_Percentage and Effective_Discount_Percentage columns.

    Both are null for orders with a null or zero order value.
    """
    try:
        logger.info("Calculating commission and discount percentages")

        df = df.copy()
        df['Commission_Percentage'] = _percentage_series(df['Commission_Fee'], df['Order_Value'])
        df['Effective_Discount_Percentage'] = _percentage_series(df['Discount_Amount'], df['Order_Value'])

        undefined = df['Commission_Percentage'].isna() & (df['Order_Value'].isna() | (df['Order_Value'] == 0))
        if undefined.any():
            logger.warning(f"{int(undefined.sum())} orders have no order value, percentages left empty")

        return df
    except Exception as e:
        logger.error(f"Error calculating percentage metrics: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_profit_by_day(df):
    """
    Total profit grouped by day of month of the order timestamp.
    """
    try:
        logger.info("Calculating total profit by day")

        order_day = df['Order_Date_and_Time'].dt.day.astype('Int64').rename('Order_Day')
        profit_by_day = df.groupby(order_day, dropna=False)['Profit'].sum().reset_index()

        profit_by_day.rename(columns={'Profit': 'Total_Profit'}, inplace=True)

        logger.info(f"Calculated profit for {len(profit_by_day)} days")
        return profit_by_day
    except Exception as e:
        logger.error(f"Error calculating profit by day: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def count_payment_methods(df):
    """
    Number of orders per payment method.

    Orders with no payment method form their own group with a count of 0,
    as a COUNT over a null column would.
    """
    try:
        logger.info("Counting payment methods")

        payment_counts = df.groupby('Payment_Method', dropna=False)['Payment_Method'].count()
        payment_counts = payment_counts.rename('Payment_Count').reset_index()

        logger.info(f"Found {len(payment_counts)} payment methods")
        return payment_counts
    except Exception as e:
        logger.error(f"Error counting payment methods: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def calculate_total_profit(df):
    """Sum of profit over all orders."""
    total_profit = float(np.round(df['Profit'].sum(), 2))
    logger.info(f"Total profit across {len(df)} orders: {total_profit}")
    return total_profit
