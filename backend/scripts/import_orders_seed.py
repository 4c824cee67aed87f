"""Load CSV seed orders into the sales-order collection."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from salesdesk.main import create_app  # noqa: E402
from salesdesk.seed import import_csv  # noqa: E402


def main() -> None:
    csv_path = ROOT.parent / "data" / "orders_seed.csv"
    if not csv_path.exists():
        raise SystemExit(f"CSV file not found: {csv_path}")

    desk = create_app()
    stats = import_csv(csv_path, desk.collections)
    print(f"Created {stats.created} orders, skipped {stats.skipped} duplicates.")


if __name__ == "__main__":
    main()
