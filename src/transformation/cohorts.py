"""
Profitability cohort analysis for the food order pipeline.
"""
import logging
import traceback
import pandas as pd

logger = logging.getLogger(__name__)

# Orders earning at most PROFITABLE_MIN_PROFIT are not counted as profitable
PROFITABLE_MIN_PROFIT = 1

COHORT_FILTERS = {
    'profitable': lambda df: df['Profit'] > PROFITABLE_MIN_PROFIT,
    'unprofitable': lambda df: df['Profit'] < 0
}


def analyze_profitability_cohorts(df):
    """
    Average commission and discount percentages for profitable and
    unprofitable orders.

    Args:
        df (DataFrame): Orders with Profit, Commission_Percentage and
            Effective_Discount_Percentage

    Returns:
        DataFrame: One row per cohort with order_count,
            Avg_Commission_Percentage and Avg_Discount_Percentage
    """
    try:
        logger.info("Analyzing profitability cohorts")

        rows = []
        for cohort, condition in COHORT_FILTERS.items():
            cohort_df = df[condition(df)]
            rows.append({
                'Cohort': cohort,
                'Order_Count': len(cohort_df),
                'Avg_Commission_Percentage': cohort_df['Commission_Percentage'].mean(),
                'Avg_Discount_Percentage': cohort_df['Effective_Discount_Percentage'].mean()
            })

            logger.info(
                f"{cohort.capitalize()} orders: {len(cohort_df)}, "
                f"avg commission {rows[-1]['Avg_Commission_Percentage']:.2f}%, "
                f"avg discount {rows[-1]['Avg_Discount_Percentage']:.2f}%"
            )

        return pd.DataFrame(rows)
    except Exception as e:
        logger.error(f"Error analyzing profitability cohorts: {str(e)}")
        logger.error(traceback.format_exc())
        raise
