"""
Data ingestion components for the food order pipeline.
"""
import os
import logging
import traceback
import pandas as pd
from sqlalchemy import inspect

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    'Order_ID',
    'Order_Value',
    'Commission_Fee',
    'Delivery_Fee',
    'Payment_Processing_Fee',
    'Order_Date_and_Time',
    'Discounts_and_Offers',
    'Payment_Method'
]

NUMERIC_COLUMNS = [
    'Order_Value',
    'Commission_Fee',
    'Delivery_Fee',
    'Payment_Processing_Fee'
]

TEXT_DTYPES = {
    'Discounts_and_Offers': 'str',
    'Payment_Method': 'str'
}


def prepare_order_types(df):
    """
    Coerce the raw order columns to their working types.

    Unparseable numbers become NaN and unparseable timestamps NaT; the
    values are left for the null audit to report rather than rejected.
    An Order_ID that is not a whole number is treated as missing.
    """
    df = df.copy()

    order_ids = pd.to_numeric(df['Order_ID'], errors='coerce')
    whole = order_ids % 1 == 0
    fractional = int((order_ids.notna() & ~whole).sum())
    if fractional:
        logger.warning(f"{fractional} rows have a non-integer Order_ID, treating them as missing")
    df['Order_ID'] = order_ids.where(whole).astype('Int64')

    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce').astype('float64')

    df['Order_Date_and_Time'] = pd.to_datetime(df['Order_Date_and_Time'], errors='coerce')

    return df


def _check_columns(df, source):
    missing = [col for col in ORDER_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Source {source} is missing required columns: {missing}")


def load_orders_csv(file_path):
    """
    Load the orders dataset from a CSV file.

    Args:
        file_path (str): Path of the CSV file

    Returns:
        DataFrame: Orders with the source columns only
    """
    try:
        logger.info(f"Loading orders from {file_path}")

        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        df = pd.read_csv(file_path, dtype=TEXT_DTYPES)
        df = df.rename(columns=lambda x: x.strip() if isinstance(x, str) else x)
        _check_columns(df, file_path)

        logger.info(f"Loaded {len(df)} rows from {file_path}")

        extra_columns = [col for col in df.columns if col not in ORDER_COLUMNS]
        if extra_columns:
            logger.info(f"Ignoring columns not used by the pipeline: {extra_columns}")

        return prepare_order_types(df[ORDER_COLUMNS])
    except Exception as e:
        logger.error(f"Failed to load orders from {file_path}: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def read_table(engine, table_name):
    """
    Read a whole table into a DataFrame.
    """
    df = pd.read_sql_table(table_name, engine)
    logger.info(f"Read {len(df)} rows from {table_name}")
    return df


def load_orders_table(engine, table_name='food'):
    """
    Load the orders dataset from an existing database table.
    """
    try:
        logger.info(f"Loading orders from table {table_name}")
        df = read_table(engine, table_name)
        _check_columns(df, table_name)
        return prepare_order_types(df[ORDER_COLUMNS])
    except Exception as e:
        logger.error(f"Failed to load orders from table {table_name}: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def load_source_orders(config, engine, input_file=None):
    """
    Load the orders dataset, preferring the configured CSV file and
    falling back to the `food` table when no file is present.
    """
    file_path = input_file or config.get_input_path()

    if os.path.exists(file_path):
        return load_orders_csv(file_path)

    logger.info(f"Input file {file_path} not found, reading orders from database")
    if not inspect(engine).has_table('food'):
        raise FileNotFoundError(
            f"No input file at {file_path} and no 'food' table in the database"
        )

    df = load_orders_table(engine)
    if len(df) == 0:
        raise ValueError("The 'food' table contains no orders")
    return df
