"""End-to-end tests for the command line entry point."""

import pytest
from pathlib import Path

from market_sd.cli import EXIT_FATAL, EXIT_OK, build_parser, main
from market_sd.persistence.state_store import StateStore


@pytest.fixture
def run_args(tmp_path: Path, markets_file: Path, aggregated_file: Path, definitions_file: Path):
    """Arguments for a run whose every path lives under tmp_path."""
    return [
        "run",
        "--config", str(tmp_path / "missing.yaml"),
        "--markets", str(markets_file),
        "--aggregated", str(aggregated_file),
        "--defaults", str(definitions_file),
        "--state", str(tmp_path / "state.properties"),
        "--out", str(tmp_path / "out" / "zabbix_sender_input.txt"),
        "--log", str(tmp_path / "logs" / "market_schedule.log"),
    ]


class TestRunCommand:
    """Test suite for `market-sd run`."""

    def test_full_run(self, tmp_path: Path, run_args, capsys) -> None:
        """Test sender file, state file, per-minute files and summary line."""
        exit_code = main(run_args + ["--now", "2026-01-05T12:00:00"])

        assert exit_code == EXIT_OK
        assert "OK markets=4 lines=4 stateChanged=true" in capsys.readouterr().out.splitlines()

        sender = (tmp_path / "out" / "zabbix_sender_input.txt").read_text().splitlines()
        assert sender == [
            "MarketSchedule NYSE_market_state 1",
            "MarketSchedule FRA_market_state 1",
            "MarketSchedule CRYPTO_market_state 1",
            "MarketSchedule GHOST_market_state 0",
        ]
        assert StateStore(tmp_path / "state.properties").load() == {"NYSE": True, "FRA": True, "CRYPTO": True}
        assert (tmp_path / "out" / "zabbix_sender_input_FRA_20260105.txt").exists()
        assert (tmp_path / "logs" / "market_schedule.log").read_text()

    def test_repeat_run_reports_no_change(self, run_args, capsys) -> None:
        main(run_args + ["--now", "2026-01-05T12:00:00"])
        capsys.readouterr()

        exit_code = main(run_args + ["--now", "2026-01-05T12:01:00+00:00"])

        assert exit_code == EXIT_OK
        assert "OK markets=4 lines=4 stateChanged=false" in capsys.readouterr().out.splitlines()

    def test_close_band_holds_across_runs(self, tmp_path: Path, run_args) -> None:
        """Test a run inside the close band keeps OPEN, a later one closes."""
        main(run_args + ["--now", "2026-01-05T15:00:00", "--no-per-minute"])
        main(run_args + ["--now", "2026-01-05T16:03:00", "--no-per-minute"])
        assert StateStore(tmp_path / "state.properties").load()["NYSE"] is True

        main(run_args + ["--now", "2026-01-05T16:10:00", "--no-per-minute"])
        assert StateStore(tmp_path / "state.properties").load()["NYSE"] is False

    def test_no_per_minute(self, tmp_path: Path, run_args) -> None:
        main(run_args + ["--now", "2026-01-05T12:00:00", "--no-per-minute"])

        assert [p.name for p in (tmp_path / "out").iterdir()] == ["zabbix_sender_input.txt"]

    def test_grace_override(self, tmp_path: Path, run_args) -> None:
        """Test a wider band keeps the market open longer."""
        main(run_args + ["--now", "2026-01-05T15:00:00", "--no-per-minute"])
        main(run_args + ["--now", "2026-01-05T16:10:00", "--no-per-minute", "--grace-minutes", "15"])

        assert StateStore(tmp_path / "state.properties").load()["NYSE"] is True

    def test_missing_markets_prints_usage(self, tmp_path: Path, capsys) -> None:
        exit_code = main(["run", "--config", str(tmp_path / "missing.yaml")])

        assert exit_code == EXIT_OK
        assert "--markets is required" in capsys.readouterr().out

    def test_unreadable_markets_is_fatal(self, tmp_path: Path, run_args, capsys) -> None:
        args = list(run_args)
        args[args.index("--markets") + 1] = str(tmp_path / "absent.list")

        assert main(args) == EXIT_FATAL
        assert "FATAL" in capsys.readouterr().err

    def test_broken_config_file_is_fatal(self, tmp_path: Path, run_args, capsys) -> None:
        """Test a YAML syntax error exits 2 instead of raising."""
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("paths: [unclosed\n")
        args = list(run_args)
        args[args.index("--config") + 1] = str(config_file)

        assert main(args) == EXIT_FATAL
        assert "Cannot parse configuration file" in capsys.readouterr().err

    def test_undecodable_markets_is_fatal(self, tmp_path: Path, run_args, capsys) -> None:
        """Test an allowlist that is not UTF-8 exits 2 instead of raising."""
        markets = tmp_path / "binary.list"
        markets.write_bytes(b"NYSE tv.XNYS \xff\xfe item\n")
        args = list(run_args)
        args[args.index("--markets") + 1] = str(markets)

        assert main(args) == EXIT_FATAL
        assert "UnicodeDecodeError" in capsys.readouterr().err

    def test_invalid_grace_is_fatal(self, run_args, capsys) -> None:
        assert main(run_args + ["--grace-minutes", "0"]) == EXIT_FATAL
        assert "grace_minutes" in capsys.readouterr().err

    def test_invalid_now_rejected(self, run_args) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(run_args + ["--now", "yesterday"])

        assert exc_info.value.code == 2


class TestGoldenCommand:
    """Test suite for `market-sd golden`."""

    def test_golden_vectors(self, tmp_path: Path, aggregated_file: Path, definitions_file: Path, capsys) -> None:
        out_dir = tmp_path / "golden"

        exit_code = main([
            "golden",
            "--config", str(tmp_path / "missing.yaml"),
            "--aggregated", str(aggregated_file),
            "--defaults", str(definitions_file),
            "--out-dir", str(out_dir),
            "--date", "2026-01-05",
        ])

        assert exit_code == EXIT_OK
        out = capsys.readouterr().out
        assert "GOLDEN OK date=2026-01-05 csv_keys=3 csv_files=3 props_keys=1 props_files=1" in out
        assert sorted(p.name for p in (out_dir / "csv").iterdir()) == [
            "golden_csv_ARCX_20260105.txt",
            "golden_csv_CRYPTO_20260105.txt",
            "golden_csv_XNYS_20260105.txt",
        ]
        props = (out_dir / "props" / "golden_props_XFRA_20260105.txt").read_text().splitlines()
        assert len(props) == 1440
        assert props[7 * 60 + 25].endswith(" 1")

    def test_invalid_date_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["golden", "--out-dir", str(tmp_path), "--date", "05/01/2026"])


class TestParser:
    """Test suite for argument parsing."""

    def test_no_arguments_prints_help(self, capsys) -> None:
        assert main([]) == EXIT_OK
        assert "usage: market-sd" in capsys.readouterr().out

    def test_subcommands(self) -> None:
        parser = build_parser()

        args = parser.parse_args(["run", "--markets", "m.list", "--json-logs"])
        assert args.command == "run"
        assert args.json_logs is True
        assert args.now is None

        args = parser.parse_args(["golden"])
        assert args.out_dir == Path("out/zabbix/golden")
