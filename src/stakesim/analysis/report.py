"""Text and tabular rendering of projection results.

Formatting only; nothing here feeds back into the engine.
"""

import pandas as pd

from stakesim.analysis.comparison import ComparisonResult
from stakesim.analysis.projection import ProjectionResult

REGIME_LABELS = {
    "capped": "Capped (0x01, 32 ETH)",
    "compounding": "Compounding (EIP-7251, 2048 ETH)",
}


def format_eth(value: float, decimals: int = 4) -> str:
    return f"{value:.{decimals}f} ETH"


def format_percent(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}%"


def format_signed(value: float, unit: str = " ETH", decimals: int = 4) -> str:
    """Format a delta with an explicit '+' for gains."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.{decimals}f}{unit}"


def time_window(years: int) -> str:
    return f"over {years} year{'s' if years != 1 else ''}"


def summary_lines(result: ProjectionResult, years: int) -> list[str]:
    summary = result["summary"]
    window = time_window(years)
    return [
        f"Regime:                  {REGIME_LABELS.get(result['credential_type'], result['credential_type'])}",
        f"Compounding:             {result['cadence']}",
        f"Final balance:           {format_eth(summary['final_balance'])}",
        f"Total rewards:           {format_eth(summary['total_rewards'])} {window}",
        f"ROI:                     {format_percent(summary['roi_percent'])} {window}",
        f"Final effective balance: {format_eth(summary['final_effective_balance'], 2)}",
    ]


def comparison_lines(comparison: ComparisonResult, years: int) -> list[str]:
    capped = comparison["capped"]["summary"]
    compounding = comparison["compounding"]["summary"]
    deltas = comparison["deltas"]

    rows = [
        ("Final balance", format_eth(capped["final_balance"]),
         format_eth(compounding["final_balance"]),
         format_signed(deltas["final_balance_delta"])),
        ("Total rewards", format_eth(capped["total_rewards"]),
         format_eth(compounding["total_rewards"]),
         format_signed(deltas["total_rewards_delta"])),
        ("ROI", format_percent(capped["roi_percent"]),
         format_percent(compounding["roi_percent"]),
         format_signed(deltas["roi_delta"], unit="%", decimals=2)),
        ("Effective balance", format_eth(capped["final_effective_balance"], 2),
         format_eth(compounding["final_effective_balance"], 2),
         format_signed(deltas["final_effective_balance_delta"], decimals=2)),
    ]

    header = (f"Metric {time_window(years)}", "0x01 (capped)", "0x02 (compounding)", "Difference")
    widths = [max(len(str(r[i])) for r in [header, *rows]) for i in range(4)]
    return [
        "  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
        for row in [header, *rows]
    ]


def series_frame(result: ProjectionResult) -> pd.DataFrame:
    """Series as a DataFrame with a 2-decimal year label, ready for charting or CSV."""
    series = result["series"]
    df = pd.DataFrame({
        "year_fraction": series["year_fraction"],
        "total_balance": series["total_balance"],
        "effective_balance": series["effective_balance"],
    })
    df.insert(0, "year", df["year_fraction"].map(lambda y: f"{y:.2f}"))
    return df


def comparison_frame(comparison: ComparisonResult) -> pd.DataFrame:
    """Both regimes on a shared year axis, one column pair per regime."""
    frames = []
    for regime in ("capped", "compounding"):
        df = series_frame(comparison[regime]).set_index("year_fraction")
        frames.append(
            df[["total_balance", "effective_balance"]].add_prefix(f"{regime}_")
        )
    joined = pd.concat(frames, axis=1).reset_index()
    joined.insert(0, "year", joined["year_fraction"].map(lambda y: f"{y:.2f}"))
    return joined
