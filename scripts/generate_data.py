"""
Sample archive generator for the price archive service.

Writes a deterministic pseudo-random price list as `data.csv` inside a ZIP
archive, ready for `POST /api/v0/prices` or `python -m src.main ingest`.
"""

from __future__ import annotations

import random
import sys
import time
from datetime import date, timedelta
from pathlib import Path
from typing import List

import typer

from src.codec.archive import build_archive
from src.codec.tabular import encode_raw_rows

app = typer.Typer(help="Generate a sample price archive (ZIP holding data.csv).")

CATEGORIES = ["dairy", "bakery", "produce", "beverages", "household"]
NAMES = ["milk", "bread", "apples", "coffee", "soap", "cheese", "juice", "rice"]


def _generate_rows(rows: int, seed: int, start_id: int = 1) -> List[List[str]]:
    rng = random.Random(seed)
    first_day = date(2024, 1, 1)
    generated: List[List[str]] = []
    for offset in range(rows):
        generated.append(
            [
                str(start_id + offset),
                f"{rng.choice(NAMES)}-{rng.randint(1, 999)}",
                rng.choice(CATEGORIES),
                f"{rng.uniform(1, 1_000):.2f}",
                (first_day + timedelta(days=rng.randint(0, 365))).isoformat(),
            ]
        )
    return generated


def _generate_archive(
    rows: int, seed: int, start_id: int = 1, payload_name: str = "data.csv"
) -> bytes:
    return build_archive(encode_raw_rows(_generate_rows(rows, seed, start_id)), payload_name)


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of rows to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    start_id: int = typer.Option(
        1,
        "--start-id",
        help="Identifier of the first row; ids are consecutive.",
    ),
    output: Path = typer.Option(
        Path("sample_data/prices.zip"),
        "--output",
        "-o",
        help="Destination ZIP path.",
    ),
) -> None:
    """
    Generate a sample price archive.
    """
    start = time.perf_counter()
    output.parent.mkdir(parents=True, exist_ok=True)

    typer.echo(f"Generating {rows:,} rows -> {output} (seed={seed}, start_id={start_id})")
    output.write_bytes(_generate_archive(rows, seed, start_id))
    duration = time.perf_counter() - start
    typer.echo(f"Archive written in {duration:.2f}s ({output.stat().st_size:,} bytes)")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
