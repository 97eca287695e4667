"""
Gate a Locust stats CSV (the row named "Aggregated") on p95 latency and
failure rate. Limits default to what one interactive page needs to feel
instant and can be overridden with PERF_P95_MS / PERF_FAIL_RATE.
Exit code 1 on breach, 2 on bad usage, else 0.
"""
import csv
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

AGGREGATE_ROWS = ("Aggregated", "Total", "Aggregated (aggregated)")


def limits() -> Tuple[float, float]:
    return (float(os.getenv("PERF_P95_MS", "800")),
            float(os.getenv("PERF_FAIL_RATE", "0.05")))


def parse_csv(path: Path) -> Tuple[Optional[float], float]:
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            if row.get("Name") not in AGGREGATE_ROWS:
                continue
            # header is "95%" or "95%ile" depending on the Locust version
            p95 = next((float(row[k]) for k in row if k.strip().startswith("95%") and row[k]), None)
            failures = float(row.get("Failure Count") or row.get("# Failures") or 0)
            requests = float(row.get("Request Count") or row.get("# Requests") or 0)
            return p95, (failures / requests if requests else 0.0)
    raise RuntimeError(f"Aggregated row not found in {path}")


def check(p95: Optional[float], fail_rate: float, p95_limit: float, fail_limit: float) -> bool:
    ok = True
    if p95 is not None and p95 > p95_limit:
        print("[perf] p95 threshold breached")
        ok = False
    if fail_rate > fail_limit:
        print("[perf] failure-rate threshold breached")
        ok = False
    return ok


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python perf/check_thresholds.py stats.csv")
        return 2
    p95_limit, fail_limit = limits()
    p95, fail_rate = parse_csv(Path(argv[0]))
    shown = "n/a" if p95 is None else f"{p95:.1f} ms"
    print(f"[perf] Aggregated p95={shown}, failure_rate={fail_rate * 100:.2f}% "
          f"(limits: p95<={p95_limit:.0f}ms, failure<={fail_limit * 100:.0f}%)")
    return 0 if check(p95, fail_rate, p95_limit, fail_limit) else 1


if __name__ == "__main__":
    sys.exit(main())
