"""
What-if simulation of commission and discount policies.
"""
import logging
import traceback
import pandas as pd
from config import SimulationParameters
from transformation.cohorts import PROFITABLE_MIN_PROFIT

logger = logging.getLogger(__name__)

SIMULATION_COLUMNS = [
    'OrderID',
    'OrderValue',
    'Simulated_Commission_Fee',
    'Simulated_Discount_Amount',
    'Simulated_Total_Costs',
    'Simulated_Profit'
]


class OrderKeyError(ValueError):
    """Raised when order identifiers cannot key the simulation table."""


def validate_order_keys(order_ids):
    """
    Check that every order identifier is present and unique.

    Raises:
        OrderKeyError: on missing or duplicate identifiers
    """
    missing_count = int(order_ids.isna().sum())
    if missing_count > 0:
        raise OrderKeyError(f"{missing_count} orders have no Order_ID")

    duplicated = order_ids[order_ids.duplicated(keep=False)]
    if len(duplicated) > 0:
        examples = duplicated.unique()[:10].tolist()
        raise OrderKeyError(
            f"{len(duplicated)} rows share a duplicate Order_ID, e.g. {examples}"
        )


def simulate_policy(df, params=None):
    """
    Recompute every order's fees, costs and profit under fixed
    commission and discount rates.

    Args:
        df (DataFrame): Orders with Order_ID, Order_Value, Delivery_Fee and
            Payment_Processing_Fee
        params (SimulationParameters): Rates in percent of order value

    Returns:
        DataFrame: One simulation record per order
    """
    if params is None:
        params = SimulationParameters()

    try:
        logger.info(
            f"Simulating policy with commission {params.commission_percentage}% "
            f"and discount {params.discount_percentage}%"
        )

        validate_order_keys(df['Order_ID'])

        simulated = pd.DataFrame({
            'OrderID': df['Order_ID'],
            'OrderValue': df['Order_Value']
        })
        simulated['Simulated_Commission_Fee'] = df['Order_Value'] * (params.commission_percentage / 100.0)
        simulated['Simulated_Discount_Amount'] = df['Order_Value'] * (params.discount_percentage / 100.0)
        simulated['Simulated_Total_Costs'] = (
            df['Delivery_Fee'].fillna(0)
            + df['Payment_Processing_Fee'].fillna(0)
            + simulated['Simulated_Discount_Amount']
        )
        simulated['Simulated_Profit'] = (
            simulated['Simulated_Commission_Fee'] - simulated['Simulated_Total_Costs']
        )

        logger.info(f"Simulated {len(simulated)} orders")
        return simulated[SIMULATION_COLUMNS].reset_index(drop=True)
    except OrderKeyError as e:
        logger.error(f"Cannot build simulation table: {str(e)}")
        raise
    except Exception as e:
        logger.error(f"Error simulating policy: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def summarize_simulation(comparison_df):
    """
    Compare total and per-order profitability of the actual and the
    simulated policy. An order counts as profitable with the same bound as
    the profitable cohort.
    """
    actual_total = float(comparison_df['Actual_Profit'].sum())
    simulated_total = float(comparison_df['Simulated_Profit'].sum())
    actual_profitable = comparison_df['Actual_Profit'] > PROFITABLE_MIN_PROFIT
    simulated_profitable = comparison_df['Simulated_Profit'] > PROFITABLE_MIN_PROFIT

    summary = pd.DataFrame([{
        'Order_Count': len(comparison_df),
        'Total_Actual_Profit': round(actual_total, 2),
        'Total_Simulated_Profit': round(simulated_total, 2),
        'Profit_Change': round(simulated_total - actual_total, 2),
        'Profitable_Orders_Actual': int(actual_profitable.sum()),
        'Profitable_Orders_Simulated': int(simulated_profitable.sum())
    }])

    logger.info(
        f"Simulated profit {simulated_total:.2f} vs actual {actual_total:.2f} "
        f"({simulated_total - actual_total:+.2f})"
    )
    return summary
