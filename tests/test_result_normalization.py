import logging

from portfolio.db.results import ResultShape, classify, first_row, normalize_rows


class TestClassify:
    def test_shapes(self):
        assert classify([]) is ResultShape.ROWS
        assert classify({"data": []}) is ResultShape.WRAPPED
        assert classify({"id": 1}) is ResultShape.SINGLE
        assert classify(None) is ResultShape.EMPTY
        assert classify(17) is ResultShape.UNKNOWN


class TestNormalizeRows:
    def test_list_of_dicts(self):
        raw = [{"id": 1, "name": "React"}, {"id": 2, "name": "Vue"}]
        assert normalize_rows(raw) == raw

    def test_list_of_tuples_uses_columns(self):
        rows = normalize_rows([(1, "React"), (2, "Vue")], ["id", "name"])
        assert rows == [{"id": 1, "name": "React"}, {"id": 2, "name": "Vue"}]

    def test_wrapped_rows(self):
        raw = {"data": [{"count": 4}]}
        assert normalize_rows(raw) == [{"count": 4}]

    def test_wrapped_rows_with_own_columns(self):
        raw = {"columns": ["count"], "data": [[4]]}
        assert normalize_rows(raw) == [{"count": 4}]

    def test_single_row_object(self):
        assert normalize_rows({"count": 0}) == [{"count": 0}]

    def test_empty_results(self):
        assert normalize_rows(None) == []
        assert normalize_rows([]) == []
        assert normalize_rows({"data": []}) == []

    def test_unknown_shape_logs_and_returns_empty(self, caplog):
        with caplog.at_level(logging.WARNING, logger="portfolio.db.results"):
            assert normalize_rows(object()) == []
        assert "Unrecognised result shape" in caplog.text

    def test_rows_without_columns_are_dropped(self):
        assert normalize_rows([(1, "React")]) == []


class TestFirstRow:
    def test_first_of_many(self):
        assert first_row([{"id": 1}, {"id": 2}]) == {"id": 1}

    def test_none_when_empty(self):
        assert first_row([]) is None
        assert first_row({"data": []}) is None
