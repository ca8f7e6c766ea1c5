# mc1r_pipeline/cli.py

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from mc1r_pipeline.config.global_config import GlobalConfig
from mc1r_pipeline.core.reference_loader import load_reference
from mc1r_pipeline.errors import FormatError
from mc1r_pipeline.pipeline import BatchResult, run_batch
from mc1r_pipeline.utils.exporters import get_exporter
from mc1r_pipeline.utils.table_builders import build_results_df


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mc1r-call",
        description="Call MC1R genotypes from Sanger AB1 chromatograms.",
    )
    parser.add_argument("reference", help="MC1R reference (FASTA or plain-text CDS)")
    parser.add_argument("files", nargs="+", help="AB1 chromatograms")
    parser.add_argument("--config", help="Optional JSON file overriding GlobalConfig sections")
    parser.add_argument("--output", help="Optional path to write results (default: stdout)")
    parser.add_argument("--format", choices=["json", "csv", "tsv"], default="json")
    parser.add_argument("--workers", type=int, default=1, help="Parallel worker processes")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def render(batch: BatchResult, fmt: str) -> str:
    if fmt == "json":
        payload = {
            "results": [r.to_dict() for r in batch.results],
            "failures": [f.to_dict() for f in batch.failures],
        }
        return json.dumps(payload, indent=4)
    return get_exporter(fmt).export(build_results_df(batch.results))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    if args.config and not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}", file=sys.stderr)
        return 2

    try:
        config = GlobalConfig.from_json(args.config) if args.config else GlobalConfig()
    except ValueError as e:
        print(f"[ERROR] Invalid config: {e}", file=sys.stderr)
        return 2

    try:
        reference = load_reference(args.reference, config.reference)
    except (FormatError, OSError) as e:
        print(f"[ERROR] Could not load reference: {e}", file=sys.stderr)
        return 2

    batch = run_batch(args.files, reference, config, max_workers=args.workers)
    for failure in batch.failures:
        print(f"[ERROR] {failure.file_path}: {failure.error_type}: {failure.message}", file=sys.stderr)

    text = render(batch, args.format)
    if args.output:
        with open(args.output, "w") as out:
            out.write(text)
        print(f"[✓] Output written to: {args.output}")
    else:
        print(text)

    return 1 if batch.failures else 0
