import numpy as np
import pandas as pd
import pytest

from config import SimulationParameters
from transformation.cohorts import analyze_profitability_cohorts
from transformation.joins import check_simulation_coverage, join_actual_and_simulated
from transformation.simulation import (
    SIMULATION_COLUMNS,
    OrderKeyError,
    simulate_policy,
    summarize_simulation,
)


def test_simulation_schema_and_defaults(derived_orders):
    simulated = simulate_policy(derived_orders)

    assert simulated.columns.tolist() == SIMULATION_COLUMNS
    assert len(simulated) == len(derived_orders)
    assert simulated['OrderID'].tolist() == [1, 2, 3, 4, 5]


def test_simulation_worked_example(derived_orders):
    simulated = simulate_policy(derived_orders, SimulationParameters(27.0, 6.0))
    row = simulated.iloc[0]

    assert row['OrderValue'] == 200.0
    assert row['Simulated_Commission_Fee'] == pytest.approx(54.0)
    assert row['Simulated_Discount_Amount'] == pytest.approx(12.0)
    assert row['Simulated_Total_Costs'] == pytest.approx(27.0)
    assert row['Simulated_Profit'] == pytest.approx(27.0)


def test_simulated_profit_formula_for_all_rows(derived_orders):
    params = SimulationParameters(commission_percentage=20.0, discount_percentage=3.0)
    simulated = simulate_policy(derived_orders, params)

    order_value = derived_orders['Order_Value'].to_numpy()
    fees = (
        derived_orders['Delivery_Fee'].fillna(0) + derived_orders['Payment_Processing_Fee'].fillna(0)
    ).to_numpy()
    expected = order_value * 20.0 / 100 - (fees + order_value * 3.0 / 100)

    np.testing.assert_allclose(simulated['Simulated_Profit'], expected)


def test_duplicate_order_ids_are_rejected(derived_orders):
    df = derived_orders.copy()
    df.loc[4, 'Order_ID'] = 1

    with pytest.raises(OrderKeyError, match="duplicate"):
        simulate_policy(df)


def test_missing_order_ids_are_rejected(derived_orders):
    df = derived_orders.copy()
    df.loc[2, 'Order_ID'] = pd.NA

    with pytest.raises(OrderKeyError, match="no Order_ID"):
        simulate_policy(df)


def test_comparison_join(derived_orders):
    simulated = simulate_policy(derived_orders)

    comparison = join_actual_and_simulated(derived_orders, simulated)

    assert comparison.columns.tolist() == [
        'Order_ID',
        'Actual_Order_Value',
        'Actual_Commission_Fee',
        'Simulated_Commission_Fee',
        'Actual_Discount_Amount',
        'Simulated_Discount_Amount',
        'Total_Cost',
        'Simulated_Total_Costs',
        'Actual_Profit',
        'Simulated_Profit',
    ]
    assert len(comparison) == 5
    first = comparison.iloc[0]
    assert first['Actual_Profit'] == 15.0
    assert first['Simulated_Profit'] == pytest.approx(27.0)
    assert first['Total_Cost'] == 35.0


def test_comparison_join_with_database_key_types(derived_orders):
    simulated = simulate_policy(derived_orders)
    simulated['OrderID'] = simulated['OrderID'].astype('int64')

    comparison = join_actual_and_simulated(derived_orders, simulated)

    assert comparison['Order_ID'].tolist() == [1, 2, 3, 4, 5]


def test_simulation_coverage_is_complete(derived_orders):
    simulated = simulate_policy(derived_orders)

    coverage = check_simulation_coverage(derived_orders, simulated)

    assert coverage['complete'] is True
    assert coverage['orders_without_simulation_count'] == 0
    assert coverage['simulations_without_order_count'] == 0


def test_simulation_coverage_reports_gaps(derived_orders):
    simulated = simulate_policy(derived_orders).iloc[1:]
    extra = pd.DataFrame([{'OrderID': 99}])
    simulated = pd.concat([simulated, extra], ignore_index=True)

    coverage = check_simulation_coverage(derived_orders, simulated)

    assert coverage['complete'] is False
    assert coverage['orders_without_simulation'] == [1]
    assert coverage['simulations_without_order'] == [99]


def test_simulation_summary(derived_orders):
    comparison = join_actual_and_simulated(derived_orders, simulate_policy(derived_orders))

    summary = summarize_simulation(comparison).iloc[0]

    assert summary['Order_Count'] == 5
    assert summary['Total_Actual_Profit'] == -90.0
    assert summary['Total_Simulated_Profit'] == pytest.approx(306.0)
    assert summary['Profit_Change'] == pytest.approx(396.0)
    assert summary['Profitable_Orders_Actual'] == 2
    assert summary['Profitable_Orders_Simulated'] == 4


def test_summary_uses_profitable_cohort_bound():
    comparison = pd.DataFrame({
        'Order_ID': [1, 2, 3, 4],
        'Actual_Profit': [0.5, 1.0, 1.5, -2.0],
        'Simulated_Profit': [1.0, 2.0, 0.0, 3.0],
    })

    summary = summarize_simulation(comparison).iloc[0]

    assert summary['Profitable_Orders_Actual'] == 1
    assert summary['Profitable_Orders_Simulated'] == 2


def test_summary_matches_profitable_cohort(derived_orders):
    comparison = join_actual_and_simulated(derived_orders, simulate_policy(derived_orders))

    summary = summarize_simulation(comparison).iloc[0]
    cohorts = analyze_profitability_cohorts(derived_orders).set_index('Cohort')

    assert summary['Profitable_Orders_Actual'] == cohorts.loc['profitable', 'Order_Count']
