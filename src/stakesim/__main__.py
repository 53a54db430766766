import logging
import sys

import click
from pydantic import ValidationError

from stakesim.config import Settings
from stakesim.exceptions import StakeSimError
from stakesim.logging_config import setup_logging

logger = logging.getLogger(__name__)

CADENCES = ["epoch", "daily", "monthly", "yearly"]
CREDENTIALS = ["capped", "compounding"]


def projection_options(func):
    """Options shared by project, compare and lookup --project."""
    func = click.option("--cadence", "-c", type=click.Choice(CADENCES), default=None,
                        help="Compounding frequency (default: settings)")(func)
    func = click.option("--years", "-y", type=int, default=None,
                        help="Time period in years (default: settings)")(func)
    func = click.option("--rate", "-r", type=float, default=None,
                        help="Annual reward rate in percent, e.g. 4.2 (default: settings)")(func)
    return func


def _resolve(settings: Settings, rate: float | None, years: int | None, cadence: str | None):
    annual_rate = rate / 100 if rate is not None else settings.default_reward_rate
    time_period = years if years is not None else settings.default_time_period_years
    return annual_rate, time_period, cadence or settings.default_cadence


def _fail(exc: StakeSimError):
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """stakesim - Ethereum validator reward projection (0x01 vs EIP-7251)"""
    try:
        settings = Settings()
    except ValidationError as e:
        click.echo(f"Error: invalid settings\n{e}", err=True)
        sys.exit(1)
    setup_logging(settings.log_dir, settings.log_level)
    if verbose:
        root = logging.getLogger()
        root.setLevel(logging.DEBUG)
        for handler in root.handlers:
            handler.setLevel(logging.DEBUG)


@cli.command()
@click.option("--balance", "-b", type=float, required=True, help="Initial balance in ETH")
@click.option("--credential", "-t", type=click.Choice(CREDENTIALS), default="compounding",
              help="Withdrawal credential regime")
@projection_options
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), default=None,
              help="Write the sampled series to a CSV file")
def project(balance: float, credential: str, rate: float | None, years: int | None,
            cadence: str | None, csv_path: str | None):
    """Project validator balance growth for one credential regime."""
    from stakesim.analysis.projection import ProjectionConfig, project as run_projection
    from stakesim.analysis.report import series_frame, summary_lines

    settings = Settings()
    annual_rate, time_period, cadence = _resolve(settings, rate, years, cadence)

    try:
        config = ProjectionConfig(
            initial_balance=balance,
            credential_type=credential,
            annual_reward_rate=annual_rate,
            time_period_years=time_period,
            cadence=cadence,
        )
        result = run_projection(config, max_intervals=settings.max_intervals)
    except StakeSimError as e:
        _fail(e)

    for line in summary_lines(result, time_period):
        click.echo(line)

    if csv_path:
        series_frame(result).to_csv(csv_path, index=False)
        click.echo(f"Series written to {csv_path}")


@cli.command()
@click.option("--balance", "-b", type=float, required=True, help="Initial balance in ETH")
@projection_options
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), default=None,
              help="Write both sampled series to a CSV file")
def compare(balance: float, rate: float | None, years: int | None, cadence: str | None,
            csv_path: str | None):
    """Compare capped (0x01) and compounding (EIP-7251) regimes side by side."""
    from stakesim.analysis.comparison import compare as run_comparison
    from stakesim.analysis.projection import ProjectionConfig
    from stakesim.analysis.report import comparison_frame, comparison_lines

    settings = Settings()
    annual_rate, time_period, cadence = _resolve(settings, rate, years, cadence)

    try:
        config = ProjectionConfig(
            initial_balance=balance,
            credential_type="compounding",
            annual_reward_rate=annual_rate,
            time_period_years=time_period,
            cadence=cadence,
        )
        result = run_comparison(config, max_intervals=settings.max_intervals)
    except StakeSimError as e:
        _fail(e)

    for line in comparison_lines(result, time_period):
        click.echo(line)

    if csv_path:
        comparison_frame(result).to_csv(csv_path, index=False)
        click.echo(f"Series written to {csv_path}")


@cli.command()
@click.argument("validator_id")
@click.option("--project", "run_project", is_flag=True,
              help="Project rewards from the fetched balance and credential type")
@projection_options
def lookup(validator_id: str, run_project: bool, rate: float | None, years: int | None,
           cadence: str | None):
    """Fetch a validator by index, public key or withdrawal address."""
    from stakesim.analysis.projection import project as run_projection
    from stakesim.analysis.report import format_eth, summary_lines
    from stakesim.api.beacon_client import BeaconClient

    settings = Settings()

    try:
        with BeaconClient.from_settings(settings) as client:
            record = client.fetch_validator(validator_id)
    except StakeSimError as e:
        _fail(e)

    label = record.validator_index if record.validator_index is not None else validator_id
    click.echo(f"Validator:          {label}")
    click.echo(f"Status:             {record.status}")
    click.echo(f"Current balance:    {format_eth(record.balance_eth, 6)}")
    click.echo(f"Effective balance:  {format_eth(record.effective_balance_eth, 2)}")
    click.echo(f"Credential prefix:  {record.credential_prefix} ({record.credential_type.value})")

    if not run_project:
        return

    annual_rate, time_period, cadence = _resolve(settings, rate, years, cadence)
    try:
        config = record.to_config(annual_rate, time_period, cadence)
        result = run_projection(config, max_intervals=settings.max_intervals)
    except StakeSimError as e:
        _fail(e)

    click.echo("")
    for line in summary_lines(result, time_period):
        click.echo(line)


if __name__ == "__main__":
    cli()
