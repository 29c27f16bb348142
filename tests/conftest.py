"""Pytest configuration and shared fixtures."""

import logging
import sys

import pytest
from pathlib import Path

import structlog

from market_sd.config.loader import ConfigLoader


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo global logging configuration made by a test."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in [h for h in root.handlers if h not in before]:
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()
    # Drop loggers cached by cache_logger_on_first_use so later tests see the reset config
    for name, module in list(sys.modules.items()):
        if name.startswith("market_sd"):
            for value in vars(module).values():
                if isinstance(value, structlog._config.BoundLoggerLazyProxy):
                    value.__dict__.pop("bind", None)


@pytest.fixture
def markets_file(tmp_path: Path) -> Path:
    """Allowlist covering each resolution source."""
    path = tmp_path / "markets.list"
    path.write_text(
        "# id tv_key item_key\n"
        "NYSE tv.XNYS NYSE_market_state\n"
        "FRA tv.XFRA FRA_market_state\n"
        "CRYPTO tv.CRYPTO CRYPTO_market_state\n"
        "GHOST tv.GHOST GHOST_market_state\n"
    )
    return path


@pytest.fixture
def aggregated_file(tmp_path: Path) -> Path:
    """Aggregated dataset with header, @date suffixes and spacing."""
    path = tmp_path / "schedule_unique.csv"
    path.write_text(
        "schedule,markets,count,tv_all\n"
        "09301600,NYSE,1,tv.XNYS@2024-01-01; tv.ARCX\n"
        "0000+0000,CRYPTO,1,tv.CRYPTO\n"
    )
    return path


@pytest.fixture
def definitions_file(tmp_path: Path) -> Path:
    """Schedule definition file in key=<definition> form."""
    path = tmp_path / "dxfeed.schedule"
    path.write_text(
        "# comment line\n"
        "tv.XFRA=hd=DE;tz=Europe/Berlin;0=p07300900r09001730;td=12345\n"
        "other.KEY=0=09001000\n"
    )
    return path


@pytest.fixture
def run_config(tmp_path: Path, markets_file: Path, aggregated_file: Path, definitions_file: Path):
    """Validated configuration pointing every path into tmp_path."""
    loader = ConfigLoader.create(tmp_path / "missing.yaml")
    return loader.build_config({
        "paths": {
            "markets": str(markets_file),
            "aggregated": str(aggregated_file),
            "definitions": str(definitions_file),
            "fallback_definitions": str(tmp_path / "no-such.schedule"),
            "state_file": str(tmp_path / "state" / "state.properties"),
            "output": str(tmp_path / "out" / "zabbix_sender_input.txt"),
            "log_file": None,
        }
    })
