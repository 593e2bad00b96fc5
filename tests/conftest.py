import pandas as pd
import pytest
from sqlalchemy import create_engine

from ingestion.loader import prepare_order_types
from transformation.discounts import add_discount_columns
from transformation.calculations import add_financial_metrics, add_percentage_metrics


RAW_ORDERS = {
    'Order_ID': [1, 2, 3, 4, 5],
    'Order_Value': [200.0, 1000.0, 500.0, 0.0, 400.0],
    'Commission_Fee': [50.0, 100.0, None, 5.0, 20.0],
    'Delivery_Fee': [10.0, 30.0, None, 0.0, 50.0],
    'Payment_Processing_Fee': [5.0, 20.0, 10.0, 0.0, 10.0],
    'Order_Date_and_Time': [
        '2024-01-05 10:00:00',
        '2024-01-05 12:00:00',
        '2024-01-06 09:30:00',
        '2024-01-06 18:00:00',
        '2024-01-07 20:00:00',
    ],
    'Discounts_and_Offers': ['10% off', '50 off Promo', None, 'Free delivery', '15% New User'],
    'Payment_Method': ['Credit Card', 'Digital Wallet', 'Cash on Delivery', None, 'Credit Card'],
}


@pytest.fixture
def raw_orders():
    return pd.DataFrame(RAW_ORDERS)


@pytest.fixture
def orders_df(raw_orders):
    return prepare_order_types(raw_orders)


@pytest.fixture
def derived_orders(orders_df):
    df = add_discount_columns(orders_df)
    df = add_financial_metrics(df)
    return add_percentage_metrics(df)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'food_order.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.ini'
    path.write_text(
        "[DATABASE]\n"
        "type = sqlite\n"
        f"name = {tmp_path / 'pipeline.db'}\n"
        "\n"
        "[LOGGING]\n"
        "level = INFO\n"
        f"file = {tmp_path / 'logs' / 'pipeline.log'}\n"
        "\n"
        "[PATHS]\n"
        f"input_dir = {tmp_path / 'input'}\n"
        f"output_dir = {tmp_path / 'output'}\n"
        "orders_file = food_orders.csv\n"
        "\n"
        "[PIPELINE]\n"
        "quality_check = true\n"
        "export_csv = false\n"
    )
    return path
