"""
Main pipeline orchestration for the food order profitability analysis.
"""
import logging
import argparse
import time
import traceback
from datetime import datetime
import pandas as pd
from config import Config
from db.engine import create_db_engine, init_db
from db.models import Base
from ingestion.loader import load_source_orders, read_table
from transformation.quality import run_data_quality_checks, audit_null_values
from transformation.discounts import add_discount_columns
from transformation.calculations import (
    add_financial_metrics,
    add_percentage_metrics,
    calculate_profit_by_day,
    count_payment_methods,
    calculate_total_profit
)
from transformation.cohorts import analyze_profitability_cohorts
from transformation.simulation import simulate_policy, summarize_simulation, OrderKeyError
from transformation.joins import join_actual_and_simulated, check_simulation_coverage
from loading.writer import write_orders, write_simulation, export_results_to_csv

logger = logging.getLogger(__name__)


def _run_simulation_stage(engine, orders_df, params, statistics, reports):
    """
    Simulate the policy, persist it and compare it with the actual results.

    Returns False if the stage failed on order keys; earlier outputs stay.
    """
    stage_start = time.time()

    try:
        simulation_df = simulate_policy(orders_df, params)
        write_simulation(engine, simulation_df)
    except OrderKeyError as e:
        logger.error(f"Simulation stage failed: {str(e)}")
        statistics['stages']['simulation'] = {
            'duration': time.time() - stage_start,
            'success': False,
            'error': str(e)
        }
        return False

    # Compare against what was actually persisted
    stored_simulation = read_table(engine, 'food_orders_simulation')
    comparison_df = join_actual_and_simulated(orders_df, stored_simulation)
    coverage = check_simulation_coverage(orders_df, stored_simulation)

    reports['simulation'] = stored_simulation
    reports['comparison'] = comparison_df
    reports['simulation_summary'] = summarize_simulation(comparison_df)

    statistics['stages']['simulation'] = {
        'duration': time.time() - stage_start,
        'success': True,
        'commission_percentage': params.commission_percentage,
        'discount_percentage': params.discount_percentage,
        'rows_simulated': len(stored_simulation),
        'join_complete': coverage['complete']
    }
    return True


def run_pipeline(config_file='config.ini', input_file=None, quality_check=None, export_csv=None,
                 commission_rate=None, discount_rate=None):
    start_time = time.time()
    statistics = {
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'status': 'failed',
        'stages': {},
        'reports': {},
    }
    reports = statistics['reports']

    try:
        logger.info("Starting food order pipeline")

        # Load configuration
        config = Config(config_file)

        # Override config settings if provided
        if quality_check is not None:
            config.config['PIPELINE']['quality_check'] = str(quality_check).lower()

        if export_csv is not None:
            config.config['PIPELINE']['export_csv'] = str(export_csv).lower()

        if commission_rate is not None:
            config.config['SIMULATION']['commission_percentage'] = str(commission_rate)

        if discount_rate is not None:
            config.config['SIMULATION']['discount_percentage'] = str(discount_rate)

        run_quality_check = config.is_quality_check_enabled()
        params = config.get_simulation_parameters()

        logger.info(f"Pipeline mode: quality_check={run_quality_check}, simulation={params}")

        # Create database engine
        engine = create_db_engine(config)

        #  Data Ingestion
        stage_start = time.time()
        orders_df = load_source_orders(config, engine, input_file)

        # Initialize database tables
        init_db(engine, Base)

        statistics['stages']['ingestion'] = {
            'duration': time.time() - stage_start,
            'rows_processed': len(orders_df)
        }

        # ---- Null audit & Quality Checks
        stage_start = time.time()
        reports['null_audit'] = audit_null_values(orders_df)

        if run_quality_check:
            quality_results = run_data_quality_checks(orders_df)
            statistics['stages']['quality_check'] = {
                'duration': time.time() - stage_start,
                'issues_found': quality_results['total_issues'],
                'duplicate_order_ids': quality_results['duplicate_keys']['duplicate_count']
            }

        # ---------Data Transformation
        stage_start = time.time()

        orders_df = add_discount_columns(orders_df)
        orders_df = add_financial_metrics(orders_df)
        orders_df = add_percentage_metrics(orders_df)

        total_profit = calculate_total_profit(orders_df)
        reports['profit_by_day'] = calculate_profit_by_day(orders_df)
        reports['payment_methods'] = count_payment_methods(orders_df)
        reports['total_profit'] = pd.DataFrame([{'Total_Profit': total_profit}])
        reports['cohorts'] = analyze_profitability_cohorts(orders_df)
        reports['orders'] = orders_df

        statistics['stages']['transformation'] = {
            'duration': time.time() - stage_start,
            'total_profit': total_profit,
            'discount_types': orders_df['Discount_Type'].value_counts().to_dict()
        }

        # -------Data Loading
        stage_start = time.time()
        rows_written = write_orders(engine, orders_df)

        statistics['stages']['loading'] = {
            'duration': time.time() - stage_start,
            'rows_written': rows_written
        }

        # -------Policy Simulation
        simulation_ok = _run_simulation_stage(engine, orders_df, params, statistics, reports)

        # Export results to CSV if requested
        if config.is_export_enabled():
            exported_files = export_results_to_csv(
                reports,
                config.get_output_path()
            )
            statistics['stages']['export'] = {
                'files_exported': len(exported_files),
                'file_paths': exported_files
            }

        statistics['status'] = 'success' if simulation_ok else 'partial'
        logger.info(f"Food order pipeline finished with status {statistics['status']}")

    except Exception as e:
        logger.error(f"Pipeline execution failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['status'] = 'failed'
        statistics['error'] = str(e)

    # Calculate total duration
    statistics['duration'] = time.time() - start_time

    return statistics


REPORT_TITLES = {
    'null_audit': 'Null values per column',
    'total_profit': 'Total profit',
    'profit_by_day': 'Total profit by day',
    'payment_methods': 'Orders per payment method',
    'cohorts': 'Profitable vs unprofitable orders',
    'simulation_summary': 'Actual vs simulated profit',
    'comparison': 'Actual vs simulated results per order'
}


def print_reports(reports, max_rows=20):
    """Print the report tables produced by a pipeline run."""
    for name, title in REPORT_TITLES.items():
        df = reports.get(name)
        if df is None:
            continue
        print(f"\n{title}:")
        print(df.head(max_rows).to_string(index=False))
        if len(df) > max_rows:
            print(f"... {len(df) - max_rows} more rows")


def main():
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Food Order Profitability Pipeline')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    parser.add_argument('--input', default=None, help='Orders CSV file, overrides the configured path')
    parser.add_argument('--commission-rate', type=float, default=None,
                        help='Simulated commission, percent of order value')
    parser.add_argument('--discount-rate', type=float, default=None,
                        help='Simulated discount, percent of order value')
    parser.add_argument('--quality-check', action='store_true', help='Run data quality checks')
    parser.add_argument('--no-quality-check', action='store_true', help='Skip data quality checks')
    parser.add_argument('--export-csv', action='store_true', help='Export reports to CSV files')

    args = parser.parse_args()

    # Determine quality check mode
    quality_check = None
    if args.quality_check:
        quality_check = True
    elif args.no_quality_check:
        quality_check = False

    # Run the pipeline
    results = run_pipeline(
        config_file=args.config,
        input_file=args.input,
        quality_check=quality_check,
        export_csv=True if args.export_csv else None,
        commission_rate=args.commission_rate,
        discount_rate=args.discount_rate
    )

    print_reports(results.get('reports', {}))

    # Print summary
    print("\nPipeline Execution Summary:")
    print(f"Status: {results['status']}")
    print(f"Duration: {results['duration']:.2f} seconds")

    if results['status'] == 'failed' and 'error' in results:
        print(f"Error: {results['error']}")

    for stage, stats in results.get('stages', {}).items():
        print(f"\n{stage.capitalize()} stage:")
        for key, value in stats.items():
            if key != 'file_paths':
                print(f"  {key}: {value}")

    return 0 if results['status'] != 'failed' else 1


if __name__ == "__main__":
    raise SystemExit(main())
