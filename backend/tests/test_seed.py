from conftest import NOW
from salesdesk.collection_service import parse_timestamp
from salesdesk.seed import generate_rows, import_csv, parse_row, write_csv


def test_generate_rows_is_deterministic():
    rows = generate_rows(20, now=NOW)
    assert rows == generate_rows(20, now=NOW)
    assert len({row["orderNumber"] for row in rows}) == 20
    assert all(parse_timestamp(row["createdAt"]) <= NOW for row in rows)


def test_parse_row_defaults():
    order = parse_row({"orderNumber": "SO-9", "total": "oops", "createdAt": ""})
    assert order == {"orderNumber": "SO-9", "customerName": "", "status": "pending", "total": 0.0}


def test_import_csv_skips_existing_orders(tmp_path, collections):
    rows = generate_rows(5, now=NOW)
    csv_path = tmp_path / "orders_seed.csv"
    write_csv(rows, csv_path)
    collections.sales_orders.add({"orderNumber": rows[0]["orderNumber"], "total": 1})

    stats = import_csv(csv_path, collections)

    assert (stats.created, stats.skipped) == (4, 1)
    stored = collections.sales_orders.get_all()
    assert len(stored) == 5
    imported = stored[1]
    assert imported["orderNumber"] == rows[1]["orderNumber"]
    assert imported["total"] == float(rows[1]["total"])
    assert parse_timestamp(imported["createdAt"]) == parse_timestamp(rows[1]["createdAt"])
    assert imported["updatedAt"] == imported["createdAt"]

    again = import_csv(csv_path, collections)
    assert (again.created, again.skipped) == (0, 5)
