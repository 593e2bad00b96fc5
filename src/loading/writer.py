"""
Data loading components for the food order pipeline.
"""
import logging
import traceback
import os
import pandas as pd
from pandas.errors import DatabaseError
from sqlalchemy import Column, MetaData, Table, inspect, text
from sqlalchemy.exc import IntegrityError
from db.models import FoodOrder, FoodOrderSimulation, table_columns
from transformation.simulation import validate_order_keys, OrderKeyError

logger = logging.getLogger(__name__)


def _needs_rebuild(engine, table):
    """
    Check whether an existing table has different columns than the model,
    e.g. a raw `food` table without derived columns.
    """
    inspector = inspect(engine)
    if not inspector.has_table(table.name):
        return False

    existing = {column['name'] for column in inspector.get_columns(table.name)}
    expected = {column.name for column in table.columns}
    if existing == expected:
        return False

    logger.info(f"Table {table.name} has columns {sorted(existing)}, rebuilding it")
    return True


def _staging_table(table):
    # Indexes are created after the swap so their names follow the final table
    columns = [
        Column(
            column.name,
            column.type,
            primary_key=column.primary_key,
            autoincrement=column.autoincrement,
            nullable=column.nullable
        )
        for column in table.columns
    ]
    return Table(f"{table.name}_rebuild", MetaData(), *columns)


def _insert_rows(conn, table_name, columns, df):
    if len(df) > 0:
        df[columns].to_sql(
            table_name,
            conn,
            if_exists='append',
            index=False,
            chunksize=500
        )


def _rebuild_table(engine, model, df):
    """
    Load the rows into a staging table with the model's schema and swap it
    in for the existing table only once every row is written.

    The old table is untouched if the load fails.
    """
    table = model.__table__
    staging = _staging_table(table)

    staging.drop(engine, checkfirst=True)
    staging.create(engine)

    try:
        with engine.begin() as conn:
            _insert_rows(conn, staging.name, table_columns(model), df)
    except Exception:
        staging.drop(engine, checkfirst=True)
        raise

    with engine.begin() as conn:
        preparer = conn.dialect.identifier_preparer
        table.drop(conn)
        conn.execute(text(
            f"ALTER TABLE {preparer.format_table(staging)} RENAME TO {preparer.quote(table.name)}"
        ))
        for index in table.indexes:
            index.create(conn)

    logger.info(f"Rebuilt table {table.name} with {len(df)} rows")
    return len(df)


def _replace_rows(engine, model, df):
    """
    Replace the rows of a table with the given DataFrame in one transaction.
    """
    table = model.__table__

    if _needs_rebuild(engine, table):
        return _rebuild_table(engine, model, df)

    if not inspect(engine).has_table(table.name):
        table.create(engine)
        logger.info(f"Created table {table.name}")

    with engine.begin() as conn:
        conn.execute(table.delete())
        logger.info(f"Cleared existing data from {table.name}")
        _insert_rows(conn, table.name, table_columns(model), df)

    logger.info(f"Successfully loaded {len(df)} rows to {table.name}")
    return len(df)


def _is_key_violation(error):
    """Check whether the error, or one it was raised from, is an integrity error."""
    while error is not None:
        if isinstance(error, IntegrityError):
            return True
        error = error.__cause__ or error.__context__
    return False


def write_orders(engine, orders_df):
    """
    Write the augmented orders to the `food` table.

    Args:
        engine: SQLAlchemy engine
        orders_df (DataFrame): Orders with all derived columns

    Returns:
        int: Number of rows written
    """
    try:
        if orders_df is None:
            raise ValueError("No orders DataFrame to load")
        if len(orders_df) == 0:
            logger.warning("No orders to load")

        return _replace_rows(engine, FoodOrder, orders_df)
    except Exception as e:
        logger.error(f"Error loading orders: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def write_simulation(engine, simulation_df):
    """
    Write simulation records to the `food_orders_simulation` table.

    Order identifiers must be unique. On a key violation nothing is
    written and an OrderKeyError is raised, whether the violation is found
    before the write or reported by the database's primary key.
    """
    try:
        validate_order_keys(simulation_df['OrderID'])
        return _replace_rows(engine, FoodOrderSimulation, simulation_df)
    except (IntegrityError, DatabaseError) as e:
        logger.error(f"Error loading simulation results: {str(e)}")
        if not _is_key_violation(e):
            raise
        raise OrderKeyError(f"food_orders_simulation rejected a duplicate OrderID: {str(e)}") from e
    except Exception as e:
        logger.error(f"Error loading simulation results: {str(e)}")
        raise


def export_results_to_csv(results, output_dir):
    """
    Export report DataFrames to CSV files.

    """
    try:
        # Create output directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        exported_files = {}

        # Export each DataFrame to CSV
        for name, df in results.items():
            if isinstance(df, pd.DataFrame) and len(df) > 0:
                file_path = os.path.join(output_dir, f"{name}.csv")
                df.to_csv(file_path, index=False)
                exported_files[name] = file_path
                logger.info(f"Exported {len(df)} rows to {file_path}")

        return exported_files
    except Exception as e:
        logger.error(f"Error exporting results to CSV: {str(e)}")
        logger.error(traceback.format_exc())
        return {}
