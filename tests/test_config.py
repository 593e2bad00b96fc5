import pytest

from config import Config, SimulationParameters
from db.engine import build_connection_string, create_db_engine


def test_simulation_defaults(tmp_path):
    config = Config(str(tmp_path / 'missing.ini'))

    assert config.get_simulation_parameters() == SimulationParameters(27.0, 6.0)
    assert config.is_quality_check_enabled() is True
    assert config.is_export_enabled() is False


def test_simulation_rates_from_file(tmp_path):
    path = tmp_path / 'config.ini'
    path.write_text(
        "[LOGGING]\n"
        f"file = {tmp_path / 'pipeline.log'}\n"
        "\n"
        "[SIMULATION]\n"
        "commission_percentage = 25\n"
        "discount_percentage = 4.5\n"
    )

    params = Config(str(path)).get_simulation_parameters()

    assert params.commission_percentage == 25.0
    assert params.discount_percentage == 4.5


def test_negative_simulation_rates_are_rejected(config_file):
    config = Config(str(config_file))
    config.config['SIMULATION']['discount_percentage'] = '-1'

    with pytest.raises(ValueError):
        config.get_simulation_parameters()


def test_input_path_defaults_to_orders_file(config_file, tmp_path):
    config = Config(str(config_file))

    assert config.get_input_path() == str(tmp_path / 'input' / 'food_orders.csv')
    assert config.get_input_path('other.csv') == str(tmp_path / 'input' / 'other.csv')


def test_connection_strings():
    base = {'name': 'food_order', 'host': 'db', 'port': '5432', 'user': 'u', 'password': 'p'}

    assert build_connection_string(dict(base, type='sqlite')) == 'sqlite:///food_order'
    assert build_connection_string(dict(base, type='postgresql')) == 'postgresql+psycopg2://u:p@db:5432/food_order'
    assert build_connection_string(dict(base, type='mysql')) == 'mysql+pymysql://u:p@db:5432/food_order'
    with pytest.raises(ValueError):
        build_connection_string(dict(base, type='oracle'))


def test_create_db_engine_for_sqlite(config_file):
    engine = create_db_engine(Config(str(config_file)))

    assert engine.dialect.name == 'sqlite'
    engine.dispose()
