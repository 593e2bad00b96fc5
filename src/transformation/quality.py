"""
Data quality checks for the food order pipeline.
"""
import logging
import pandas as pd
import traceback
from ingestion.loader import ORDER_COLUMNS, NUMERIC_COLUMNS

logger = logging.getLogger(__name__)


def audit_null_values(df):
    """
    Count missing values in every source column.

    Returns:
        DataFrame: One row per column with its null count
    """
    columns = [col for col in ORDER_COLUMNS if col in df.columns]
    null_counts = df[columns].isnull().sum()

    audit = pd.DataFrame({
        'Column': null_counts.index,
        'Null_Count': null_counts.values.astype(int)
    })

    logger.info(f"Null audit found {int(audit['Null_Count'].sum())} missing values")
    return audit


def run_data_quality_checks(df):
    """
    Run a series of data quality checks on the orders data.

    The checks only report; the data itself is not modified.
    """
    try:
        logger.info("Running data quality checks")

        quality_results = {}

        # Run individual checks
        quality_results['missing_values'] = check_missing_values(df)
        quality_results['duplicate_keys'] = check_duplicate_keys(df)
        quality_results['value_ranges'] = check_value_ranges(df)

        total_issues = (
            quality_results['missing_values']['total_missing']
            + quality_results['duplicate_keys']['duplicate_count']
            + sum(result['invalid_count'] for result in quality_results['value_ranges'].values())
        )
        quality_results['total_issues'] = total_issues

        # Log summary of issues
        if total_issues > 0:
            logger.warning(f"Found a total of {total_issues} data quality issues")
        else:
            logger.info("All data quality checks passed")

        return quality_results
    except Exception as e:
        logger.error(f"Error running data quality checks: {str(e)}")
        logger.error(traceback.format_exc())
        raise


def check_missing_values(df):
    """
    Check for missing values in the orders data.
    """
    missing_by_column = df.isnull().sum()
    total_missing = int(missing_by_column.sum())

    # Only include columns with missing values
    missing_columns = {
        col: int(count) for col, count in missing_by_column[missing_by_column > 0].items()
    }

    if total_missing > 0:
        logger.warning(f"Orders have {total_missing} missing values")
        for col, count in missing_columns.items():
            logger.warning(f"  - Column '{col}': {count} missing values")

    return {
        'total_missing': total_missing,
        'missing_columns': missing_columns
    }


def check_duplicate_keys(df, key_columns=('Order_ID',)):
    """
    Check for duplicate order identifiers.
    """
    key_columns = list(key_columns)

    # Skip if not all key columns exist
    if not all(col in df.columns for col in key_columns):
        return {
            'duplicate_count': 0,
            'error': f"Not all key columns {key_columns} exist in table"
        }

    keyed = df.dropna(subset=key_columns)
    duplicates = keyed[keyed.duplicated(subset=key_columns, keep=False)]
    duplicate_count = len(duplicates)

    if duplicate_count > 0:
        logger.warning(f"Orders have {duplicate_count} rows with duplicate {key_columns}")

    return {
        'duplicate_count': duplicate_count,
        'duplicate_keys': duplicates[key_columns].drop_duplicates().head(10).values.tolist() if duplicate_count > 0 else []
    }


def check_value_ranges(df):
    """
    Check for values outside of expected ranges.

    Null values are not counted here, the missing value check covers them.
    """
    results = {}

    # Order value and every fee should be non-negative
    for column in NUMERIC_COLUMNS:
        if column not in df.columns:
            results[column] = {'invalid_count': 0, 'error': f"Column '{column}' not found in table"}
            continue

        invalid_mask = df[column].notna() & (df[column] < 0)
        invalid_count = int(invalid_mask.sum())

        results[column] = {
            'invalid_count': invalid_count,
            'invalid_examples': df.loc[invalid_mask, column].head(5).tolist() if invalid_count > 0 else []
        }

        if invalid_count > 0:
            logger.warning(f"Column '{column}' has {invalid_count} negative values")

    return results
