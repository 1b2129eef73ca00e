# caldom/main.py
"""
Entrypoint: `python -m caldom.main calendars/*.yml --out public/ics`

- One YAML file per calendar; each becomes <out>/<name>.ics.
- Calendars are independent: a failure is reported and the rest keep going.
- Optional --report writes a JSON summary of the run.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .calendar import Calendar
from .errors import CalDomError

LOG_LEVEL = os.environ.get("CALDOM_LOG_LEVEL", "INFO")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate .ics calendars from HTML schedule pages")
    parser.add_argument("configs", nargs="+", help="Calendar YAML files")
    parser.add_argument("--out", default="calendars", help="Output directory for .ics files")
    parser.add_argument("--jobs", type=int, default=1, help="Calendars to generate in parallel")
    parser.add_argument("--report", default=None, help="Write a JSON run report to this path")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    return parser.parse_args(argv)


def generate_one(config_path: str, out_dir: str) -> Dict[str, Any]:
    result: Dict[str, Any] = {"config": config_path, "name": None, "ok": False}
    try:
        cal = Calendar.load(config_path)
        result["name"] = cal.name
        path = cal.generate_calendar(out_dir)
        result.update({
            "ok": True,
            "path": str(path),
            "events": len(cal.events),
            "valid": len(cal.valid_events()),
        })
    except CalDomError as ex:
        result["error"] = str(ex)
    except Exception as ex:  # one broken calendar must not stop the run
        logging.exception("%s: unexpected error", result["name"] or config_path)
        result["error"] = f"{type(ex).__name__}: {ex}"
    return result


def write_report(results: List[Dict[str, Any]], path: str) -> None:
    report = {
        "when": datetime.now(timezone.utc).isoformat(),
        "calendars": results,
        "failed": sum(1 for r in results if not r["ok"]),
    }
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(message)s")

    jobs = max(1, args.jobs)
    if jobs == 1:
        results = [generate_one(c, args.out) for c in args.configs]
    else:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            results = list(pool.map(lambda c: generate_one(c, args.out), args.configs))

    for r in results:
        label = r["name"] or r["config"]
        if r["ok"]:
            print(f"- {label}: {r['valid']} of {r['events']} events -> {r['path']}")
        else:
            print(f"- {label} ERROR: {r['error']}")

    if args.report:
        write_report(results, args.report)

    return 1 if any(not r["ok"] for r in results) else 0


if __name__ == "__main__":
    raise SystemExit(main())
