#!/usr/bin/env python3
"""Report readiness of the Skill Swap API: config, packages, database and schema revision.

Exit 0 if the required checks pass (an outdated schema only warns), 1 otherwise.
"""
import sys
from pathlib import Path

# Ensure the backend package is on path when run as script
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from skillswap.readiness import REQUIRED_CHECKS, is_ready, migration_head, run_all_checks


def main() -> int:
    print(f"Alembic head: {migration_head()}")
    checks = run_all_checks()
    ready, summary = is_ready(checks)
    for name, msg in summary.items():
        if checks[name][0]:
            status = "OK"
        else:
            status = "FAIL" if name in REQUIRED_CHECKS else "WARN"
        print(f"  {name}: {status}  {msg}")
    if not checks["migrations"][0] and checks["database"][0]:
        print("  hint: run `alembic upgrade head` from backend/")
    print("")
    if ready:
        print("Readiness: READY (all required checks passed)")
        return 0
    print("Readiness: NOT READY (one or more required checks failed)")
    return 1


if __name__ == "__main__":
    sys.exit(main())
