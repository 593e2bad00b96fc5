"""
Database connection handling for the food order pipeline.
"""
import logging
from sqlalchemy import create_engine
from config import Config

logger = logging.getLogger(__name__)


def build_connection_string(db_config):
    """
    Build a SQLAlchemy URL from the DATABASE config section.
    """
    db_type = db_config['type']

    if db_type == 'sqlite':
        return f"sqlite:///{db_config['name']}"
    elif db_type in ('postgresql', 'postgres'):
        return f"postgresql+psycopg2://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"
    elif db_type == 'mysql':
        return f"mysql+pymysql://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"

    raise ValueError(f"Unsupported database type: {db_type}")


def create_db_engine(config=None):

    try:
        if config is None:
            config = Config()

        db_config = config.get_database_config()
        connection_string = build_connection_string(db_config)

        engine = create_engine(connection_string)
        logger.info(f"Database connection created for {db_config['type']}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database connection: {str(e)}")
        raise


def init_db(engine, base):
    """
    Initialize database tables.
    """
    base.metadata.create_all(engine)
    logger.info("Database tables initialized")
