from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
from loguru import logger

from .address import Address
from .config import ResolverConfig, load_config
from .exceptions import HKGeocoderError
from .resolver import AddressResolver

OUTPUT_COLUMNS = [
    "query",
    "rank",
    "source",
    "address_zh",
    "address_en",
    "latitude",
    "longitude",
    "match_score",
    "distance",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hk-geocode",
        description="Resolve Hong Kong addresses with OGCIO and Lands Department lookups",
    )
    parser.add_argument("addresses", nargs="*", help="addresses to resolve")
    parser.add_argument("-i", "--input", type=Path, help="input file (.csv, .txt or .xlsx)")
    parser.add_argument("-c", "--column", default="address", help="address column for .csv/.xlsx input")
    parser.add_argument("-o", "--output", type=Path, help="output file (.csv or .xlsx); prints a table if omitted")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--concurrency", type=int, help="maximum lookups in flight")
    parser.add_argument("--top", type=int, default=1, help="results kept per address, default 1")
    parser.add_argument("--log-level", help="override runtime.log_level")
    return parser


def read_addresses(path: Path, column: str = "address") -> list[str]:
    ext = path.suffix.lower()
    if ext == ".txt":
        with open(path, "r", encoding="utf-8-sig") as fh:
            return [line.strip() for line in fh if line.strip()]
    if ext == ".csv":
        df = pd.read_csv(path, encoding="utf-8-sig", dtype=str)
    else:
        df = pd.read_excel(path, dtype=str)
    if column not in df.columns:
        raise ValueError(f"column '{column}' not found in {path}")
    return [value.strip() for value in df[column].dropna() if value.strip()]


def to_rows(queries: Sequence[str], results: Sequence[Sequence[Address]], top: int = 1) -> list[dict]:
    rows: list[dict] = []
    for query, addresses in zip(queries, results):
        if not addresses:
            rows.append({"query": query})
            continue
        for rank, address in enumerate(addresses[:top], start=1):
            rows.append({"query": query, "rank": rank, **address.to_dict()})
    return rows


def export(rows: Sequence[dict], output: Optional[Path]) -> None:
    df = pd.DataFrame(list(rows), columns=OUTPUT_COLUMNS)
    if output is None:
        print(df.to_string(index=False))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".xlsx":
        df.to_excel(output, index=False)
    else:
        df.to_csv(output, index=False, encoding="utf-8-sig")
    logger.info("Results written to {path}", path=output)


async def _resolve_all(config: ResolverConfig, queries: Sequence[str], concurrency: Optional[int]) -> list:
    async with AddressResolver(config) as resolver:
        return await resolver.resolve_many(queries, concurrency_limit=concurrency)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config) if args.config else ResolverConfig()

    logger.remove()
    logger.add(sys.stderr, level=(args.log_level or config.runtime.log_level).upper())

    queries = list(args.addresses)
    if args.input:
        queries.extend(read_addresses(args.input, args.column))
    if not queries:
        parser.error("no addresses given")

    try:
        results = asyncio.run(_resolve_all(config, queries, args.concurrency))
    except HKGeocoderError as exc:
        logger.error(str(exc))
        raise SystemExit(1)
    export(to_rows(queries, results, top=args.top), args.output)
    logger.info("Done, {count} address(es) resolved", count=len(queries))


if __name__ == "__main__":
    main()
