#!/usr/bin/env python3
"""Print (or save as JSON) a ranch report for a YAML snapshot.

Runs capacity, quota, population and harvest-candidate calculations over
one snapshot file.

Example:
    python scripts/ranch_report.py data/example_ranch.yaml --as-of 2024-06-30
    python scripts/ranch_report.py data/example_ranch.yaml --json report.json
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from ranch_ecology.config import load_config
from ranch_ecology.report import build_report, format_report, report_to_dict
from ranch_ecology.snapshot import load_snapshot

BASE = Path(__file__).parent.parent
DEFAULT_CONFIG = BASE / "configs" / "default.yaml"


# ═══════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Capacity, quota and harvest-candidate report for a ranch snapshot.",
        epilog="Example: python scripts/ranch_report.py data/example_ranch.yaml",
    )
    parser.add_argument(
        "snapshot",
        help="YAML snapshot of ranch records",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help=f"Base config YAML (default: {DEFAULT_CONFIG.relative_to(BASE)} if present)",
    )
    parser.add_argument(
        "--override", type=str, default=None,
        help="Ranch-specific config YAML merged over the base config",
    )
    parser.add_argument(
        "--as-of", type=date.fromisoformat, default=None,
        help="Report date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--json", type=str, default=None, metavar="PATH",
        help="Write the report as JSON instead of printing it",
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        config_path = Path(args.config)
    elif DEFAULT_CONFIG.exists():
        config_path = DEFAULT_CONFIG
    else:
        # Code defaults; the override still applies
        config_path = None
    try:
        if args.override and not Path(args.override).exists():
            raise FileNotFoundError(f"Override config not found: {args.override}")
        config = load_config(config_path, override_path=args.override)
        snapshot = load_snapshot(args.snapshot)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    report = build_report(snapshot, config, as_of=args.as_of)

    if args.json:
        with open(args.json, "w") as f:
            json.dump(report_to_dict(report), f, indent=2)
        print(f"Saved: {args.json}")
    else:
        print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
