"""Table description tests — JSON type inference from sample rows."""

from chainlab.core.table_describe import describe_rows, json_type_name


def test_json_type_names():
    assert [json_type_name(v) for v in (None, True, 1, 2.5, "x", [1], {"a": 1})] == [
        "null", "boolean", "number", "number", "string", "array", "object",
    ]


def test_columns_in_first_seen_order_with_first_non_null_type():
    rows = [{"id": 1, "note": None}, {"id": 2, "note": "hi", "extra": True}]
    info = describe_rows("t", rows)
    assert info["columns"] == [
        {"name": "id", "inferred_type": "number"},
        {"name": "note", "inferred_type": "string"},
        {"name": "extra", "inferred_type": "boolean"},
    ]
    assert info["row_count_sample"] == 2
    assert info["exists"] is True


def test_missing_table():
    info = describe_rows("ghost", [], exists=False)
    assert info == {
        "table": "ghost", "exists": False, "row_count_sample": 0, "columns": [], "sample": [],
    }
