"""Tests for the stakesim command-line interface."""

import os

import pandas as pd
import pytest
from click.testing import CliRunner

from stakesim.__main__ import cli
from stakesim.api.beacon_client import BeaconClient, ValidatorRecord
from stakesim.exceptions import UpstreamUnavailable


@pytest.fixture
def run():
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli, list(args))

    with runner.isolated_filesystem():
        yield _run


@pytest.fixture
def fake_lookup(monkeypatch, validator_payload):
    record = ValidatorRecord.from_payload(validator_payload)
    monkeypatch.setattr(BeaconClient, "fetch_validator", lambda self, validator_id: record)
    return record


class TestProjectCommand:
    def test_summary(self, run):
        result = run("project", "--balance", "32.1", "--credential", "compounding",
                     "--rate", "4.2", "--years", "1", "--cadence", "yearly")
        assert result.exit_code == 0, result.output
        assert "33.4440 ETH" in result.output
        assert "33.25 ETH" in result.output
        assert "over 1 year" in result.output

    def test_csv_export(self, run):
        result = run("project", "-b", "32", "-t", "capped", "-r", "4.2", "-y", "2",
                     "-c", "monthly", "--csv", "series.csv")
        assert result.exit_code == 0, result.output
        assert "Series written to series.csv" in result.output

        df = pd.read_csv("series.csv")
        assert list(df.columns) == ["year", "year_fraction", "total_balance", "effective_balance"]
        assert len(df) == 25
        assert df["effective_balance"].max() <= 32.0

    def test_invalid_balance(self, run):
        result = run("project", "--balance", "0", "--years", "1")
        assert result.exit_code == 1
        assert "Error: initial_balance must be > 0" in result.output

    def test_interval_ceiling(self, run, monkeypatch):
        monkeypatch.setenv("SS_MAX_INTERVALS", "10")
        result = run("project", "--balance", "32", "--years", "1", "--cadence", "daily")
        assert result.exit_code == 1
        assert "exceeds ceiling" in result.output

    def test_unknown_cadence_is_usage_error(self, run):
        result = run("project", "--balance", "32", "--cadence", "weekly")
        assert result.exit_code == 2


class TestCompareCommand:
    def test_table(self, run):
        result = run("compare", "--balance", "64", "--rate", "4.2", "--years", "1",
                     "--cadence", "monthly")
        assert result.exit_code == 0, result.output
        assert "Metric over 1 year" in result.output
        assert "0x01 (capped)" in result.output
        assert "Difference" in result.output

    def test_csv_export(self, run):
        result = run("compare", "-b", "64", "-y", "1", "-c", "yearly", "--csv", "compare.csv")
        assert result.exit_code == 0, result.output
        df = pd.read_csv("compare.csv")
        assert len(df) == 2
        assert "compounding_effective_balance" in df.columns


class TestLookupCommand:
    def test_lookup(self, run, fake_lookup):
        result = run("lookup", "12345")
        assert result.exit_code == 0, result.output
        assert "Validator:          12345" in result.output
        assert "Current balance:    32.012346 ETH" in result.output
        assert "Effective balance:  32.00 ETH" in result.output
        assert "0x01 (compounding)" in result.output
        assert "Final balance" not in result.output

    def test_lookup_with_projection(self, run, fake_lookup):
        result = run("lookup", "12345", "--project", "--rate", "4.2", "--years", "1",
                     "--cadence", "yearly")
        assert result.exit_code == 0, result.output
        assert "Compounding (EIP-7251, 2048 ETH)" in result.output
        assert "Final balance" in result.output

    def test_lookup_upstream_failure(self, run, monkeypatch):
        def _fail(self, validator_id):
            raise UpstreamUnavailable("API request failed with status 404", status_code=404)

        monkeypatch.setattr(BeaconClient, "fetch_validator", _fail)
        result = run("lookup", "12345")
        assert result.exit_code == 1
        assert "status 404" in result.output


class TestSettingsErrors:
    def test_bad_default_cadence(self, run, monkeypatch):
        monkeypatch.setenv("SS_DEFAULT_CADENCE", "weekly")
        result = run("project", "--balance", "32")
        assert result.exit_code == 1
        assert "invalid settings" in result.output

    def test_log_dir_from_settings(self, run, monkeypatch):
        monkeypatch.setenv("SS_LOG_DIR", "custom-logs")
        result = run("project", "--balance", "32", "--years", "1", "--cadence", "yearly")
        assert result.exit_code == 0, result.output
        assert os.path.isfile(os.path.join("custom-logs", "stakesim.log"))
