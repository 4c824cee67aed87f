"""Generate mock sales orders as a CSV seed file."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "backend"))

from salesdesk.seed import generate_rows, write_csv  # noqa: E402

path = ROOT / "data" / "orders_seed.csv"
rows = generate_rows(100)
write_csv(rows, path)

print(f"Generated {len(rows)} rows -> {path}")
