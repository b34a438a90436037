"""Settings resolution tests."""

from pathlib import Path

import pytest

from stockroom.config import DEFAULT_LOW_STOCK, Settings, default_db_path


def test_defaults_with_empty_environment():
    s = Settings.from_env(env={})
    assert s.db == str(default_db_path())
    assert s.low_stock_threshold == DEFAULT_LOW_STOCK
    assert Path(s.db).name == "inventory.json"


def test_env_db_used_when_no_option():
    s = Settings.from_env(env={"STOCKROOM_DB": "/tmp/x.db"})
    assert s.db == "/tmp/x.db"


def test_option_beats_env():
    s = Settings.from_env(db="here.json", env={"STOCKROOM_DB": "/tmp/x.db"})
    assert s.db == "here.json"


def test_low_stock_threshold_from_env():
    assert Settings.from_env(env={"STOCKROOM_LOW_STOCK": " 12 "}).low_stock_threshold == 12


@pytest.mark.parametrize("raw", ["many", "-1", "2.5"])
def test_bad_low_stock_threshold(raw):
    with pytest.raises(ValueError, match="STOCKROOM_LOW_STOCK"):
        Settings.from_env(env={"STOCKROOM_LOW_STOCK": raw})
