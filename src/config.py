"""
Configuration handling for the food order profitability pipeline.
"""
import os
import logging
import configparser
from pathlib import Path
from typing import NamedTuple
from dotenv import load_dotenv

load_dotenv()
# Load environment variables
DB_TYPE = os.getenv("DB_TYPE", "sqlite")
DB_NAME = os.getenv("DB_NAME", "food_order.db")
DB_HOST = os.getenv("DB_HOST", "")
DB_PORT = os.getenv("DB_PORT", "")
DB_USER = os.getenv("DB_USER", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")

DEFAULT_COMMISSION_PERCENTAGE = 27.0
DEFAULT_DISCOUNT_PERCENTAGE = 6.0

logger = logging.getLogger(__name__)


class SimulationParameters(NamedTuple):
    """Fixed policy rates, in percent of order value, used by the simulation."""
    commission_percentage: float = DEFAULT_COMMISSION_PERCENTAGE
    discount_percentage: float = DEFAULT_DISCOUNT_PERCENTAGE


class Config:
    """Configuration manager for the food order pipeline."""

    def __init__(self, config_file='config.ini'):
        """
        Initialize configuration from config file.
        """
        self.config = configparser.ConfigParser()

        # Set default values
        self._set_defaults()

        # Try to read from config file
        config_path = Path(config_file)
        if config_path.exists():
            self.config.read(config_path)
            self._setup_logging()
        else:
            logger.warning(f"Config file {config_file} not found. Using defaults.")

    def _set_defaults(self):
        """Set default configuration values."""
        self.config['DATABASE'] = {
            'type': DB_TYPE,
            'name': DB_NAME,
            'host': DB_HOST,
            'port': DB_PORT,
            'user': DB_USER,
            'password': DB_PASSWORD
        }

        self.config['LOGGING'] = {
            'level': 'INFO',
            'file': 'logs/pipeline.log'
        }

        self.config['PATHS'] = {
            'input_dir': 'data/input',
            'output_dir': 'data/output',
            'orders_file': 'food_orders.csv'
        }

        self.config['PIPELINE'] = {
            'quality_check': 'true',
            'export_csv': 'false'
        }

        self.config['SIMULATION'] = {
            'commission_percentage': str(DEFAULT_COMMISSION_PERCENTAGE),
            'discount_percentage': str(DEFAULT_DISCOUNT_PERCENTAGE)
        }

    def _setup_logging(self):
        """Configure logging based on settings."""
        log_config = self.config['LOGGING']
        log_level = getattr(logging, log_config.get('level', 'INFO').upper(), logging.INFO)
        log_file = log_config.get('file', 'logs/pipeline.log')

        # Create directory for log file if it doesn't exist
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # Configure logging
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler()
            ]
        )

    def get_database_config(self):
        """
        Get database configuration.

        """
        return {
            'type': self.config['DATABASE'].get('type'),
            'name': self.config['DATABASE'].get('name'),
            'host': self.config['DATABASE'].get('host'),
            'port': self.config['DATABASE'].get('port'),
            'user': self.config['DATABASE'].get('user'),
            'password': self.config['DATABASE'].get('password')
        }

    def get_input_path(self, filename=None):
        """
        Get input directory or file path.

        Defaults to the configured orders file when no filename is given.
        """
        input_dir = self.config['PATHS'].get('input_dir', 'data/input')

        if filename is None:
            filename = self.config['PATHS'].get('orders_file', 'food_orders.csv')
        return os.path.join(input_dir, filename)

    def get_output_path(self, filename=None):
        """
        Get output directory or file path.

        """
        output_dir = self.config['PATHS'].get('output_dir', 'data/output')

        # Create directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if filename:
            return os.path.join(output_dir, filename)
        return output_dir

    def is_quality_check_enabled(self):
        """
        Check if data quality checks are enabled.

        """
        return self.config['PIPELINE'].getboolean('quality_check', True)

    def is_export_enabled(self):
        """Check if report tables should be exported to CSV."""
        return self.config['PIPELINE'].getboolean('export_csv', False)

    def get_simulation_parameters(self):
        """
        Get the policy rates used by the profitability simulation.

        Returns:
            SimulationParameters: commission and discount rates in percent
        """
        section = self.config['SIMULATION']
        params = SimulationParameters(
            commission_percentage=section.getfloat(
                'commission_percentage', DEFAULT_COMMISSION_PERCENTAGE
            ),
            discount_percentage=section.getfloat(
                'discount_percentage', DEFAULT_DISCOUNT_PERCENTAGE
            )
        )

        if params.commission_percentage < 0 or params.discount_percentage < 0:
            raise ValueError(f"Simulation rates must be non-negative, got {params}")
        return params
