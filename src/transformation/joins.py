"""
Data joining operations for the food order pipeline.
"""
import logging
import pandas as pd
import traceback

logger = logging.getLogger(__name__)

COMPARISON_COLUMNS = {
    'Order_ID': 'Order_ID',
    'Order_Value': 'Actual_Order_Value',
    'Commission_Fee': 'Actual_Commission_Fee',
    'Simulated_Commission_Fee': 'Simulated_Commission_Fee',
    'Discount_Amount': 'Actual_Discount_Amount',
    'Simulated_Discount_Amount': 'Simulated_Discount_Amount',
    'Total_Costs': 'Total_Cost',
    'Simulated_Total_Costs': 'Simulated_Total_Costs',
    'Profit': 'Actual_Profit',
    'Simulated_Profit': 'Simulated_Profit'
}


def join_actual_and_simulated(orders, simulation):
    """
    Join actual order results with their simulated counterparts.

    """
    try:
        logger.info("Joining actual orders with simulation results")

        # Align key types, the simulation table may come back from the database as int64
        orders = orders.copy()
        simulation = simulation.copy()
        orders['Order_ID'] = orders['Order_ID'].astype('Int64')
        simulation['OrderID'] = simulation['OrderID'].astype('Int64')

        comparison = pd.merge(
            orders,
            simulation,
            left_on='Order_ID',
            right_on='OrderID',
            how='inner'
        )

        comparison = comparison[list(COMPARISON_COLUMNS)].rename(columns=COMPARISON_COLUMNS)

        logger.info(f"Joined data has {len(comparison)} rows")
        return comparison.reset_index(drop=True)
    except Exception as e:
        logger.error(f"Error joining actual and simulated data: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def check_simulation_coverage(orders, simulation):
    """
    Check that actual and simulated results pair up one to one.
    """
    try:
        order_ids = orders['Order_ID'].dropna().astype('int64')
        simulated_ids = simulation['OrderID'].dropna().astype('int64')

        ids_in_orders = set(order_ids)
        ids_in_simulation = set(simulated_ids)

        orders_without_simulation = ids_in_orders - ids_in_simulation
        simulations_without_order = ids_in_simulation - ids_in_orders
        repeated_in_orders = set(order_ids[order_ids.duplicated()])

        results = {
            'orders_without_simulation_count': len(orders_without_simulation),
            'orders_without_simulation': sorted(orders_without_simulation)[:10],  # Limit to first 10 for logging purpose
            'simulations_without_order_count': len(simulations_without_order),
            'simulations_without_order': sorted(simulations_without_order)[:10],
            'repeated_order_ids_count': len(repeated_in_orders),
            'complete': not (orders_without_simulation or simulations_without_order or repeated_in_orders)
        }

        # Log the issues found
        if results['orders_without_simulation_count'] > 0:
            logger.warning(f"Found {results['orders_without_simulation_count']} orders with no simulation result")

        if results['simulations_without_order_count'] > 0:
            logger.warning(f"Found {results['simulations_without_order_count']} simulation results with no order")

        if results['repeated_order_ids_count'] > 0:
            logger.warning(f"Found {results['repeated_order_ids_count']} order ids that match several orders")

        return results

    except Exception as e:
        logger.error(f"Error checking simulation coverage: {str(e)}")
        logger.error(traceback.format_exc())
        raise
