"""Tests for JsonResult path lookup."""

import json

import pytest

from lnd_rest.result import JsonResult, split_path


DOC = {
    "alias": "alice",
    "block_height": 800000,
    "local_balance": {"sat": "150000", "msat": "150000000"},
    "invoices": [
        {"memo": "coffee", "value": "100", "settled": True},
        {"memo": "tea", "value": "50", "settled": False},
    ],
    "features": {"9.x": {"name": "tlv-onion"}},
    "empty": None,
}


class TestSplitPath:
    def test_simple(self):
        assert split_path("a.b.c") == ["a", "b", "c"]

    def test_escaped_dot(self):
        assert split_path("features.9\\.x.name") == ["features", "9.x", "name"]

    def test_single(self):
        assert split_path("alias") == ["alias"]


class TestGet:
    def test_top_level_key(self):
        assert JsonResult(DOC).get("alias").value == "alice"

    def test_nested_key(self):
        assert JsonResult(DOC).get("local_balance.sat").value == "150000"

    def test_array_index(self):
        assert JsonResult(DOC).get("invoices.1.memo").value == "tea"

    def test_array_length(self):
        assert JsonResult(DOC).get("invoices.#").value == 2

    def test_escaped_key(self):
        assert JsonResult(DOC).get("features.9\\.x.name").value == "tlv-onion"

    def test_missing_key(self):
        missing = JsonResult(DOC).get("nope.deeper")
        assert missing.exists is False
        assert missing.value is None

    def test_index_out_of_range(self):
        assert JsonResult(DOC).get("invoices.5").exists is False

    def test_non_numeric_index(self):
        assert JsonResult(DOC).get("invoices.first").exists is False

    def test_null_exists(self):
        null = JsonResult(DOC).get("empty")
        assert null.exists is True
        assert null.value is None

    def test_chaining(self):
        result = JsonResult(DOC)
        assert result.get("invoices").get("0").get("memo").value == "coffee"

    def test_id_field(self):
        assert JsonResult({"id": 42}).get("id").value == 42


class TestConversions:
    def test_string_int(self):
        assert JsonResult(DOC).get("local_balance.sat").as_int() == 150000

    def test_real_int(self):
        assert JsonResult(DOC).get("block_height").as_int() == 800000

    def test_int_default_on_missing(self):
        assert JsonResult(DOC).get("missing").as_int(default=-1) == -1

    def test_int_of_non_finite_is_default(self):
        assert JsonResult({"v": float("inf")}).get("v").as_int(default=-1) == -1
        assert JsonResult({"v": float("nan")}).get("v").as_int(default=-1) == -1
        assert JsonResult({"v": "1e999"}).get("v").as_int(default=-1) == -1

    def test_float(self):
        assert JsonResult({"x": "1.5"}).get("x").as_float() == 1.5

    def test_bool(self):
        assert JsonResult(DOC).get("invoices.0.settled").as_bool() is True
        assert JsonResult({"b": "true"}).get("b").as_bool() is True

    def test_str_of_object(self):
        assert json.loads(JsonResult(DOC).get("local_balance").as_str()) == DOC["local_balance"]

    def test_str_of_missing(self):
        assert JsonResult(DOC).get("missing").as_str() == ""

    def test_as_list(self):
        memos = [item.get("memo").as_str() for item in JsonResult(DOC).get("invoices").as_list()]
        assert memos == ["coffee", "tea"]

    def test_iterate(self):
        assert len(list(JsonResult(DOC).get("invoices"))) == 2


class TestContainerProtocol:
    def test_getitem(self):
        result = JsonResult({"value": 100, "memo": "coffee"})
        assert result["value"] == 100
        assert result["memo"] == "coffee"

    def test_getitem_missing(self):
        with pytest.raises(KeyError):
            JsonResult({})["value"]

    def test_contains(self):
        assert "invoices.0.memo" in JsonResult(DOC)
        assert "invoices.9" not in JsonResult(DOC)

    def test_parse(self):
        result = JsonResult.parse('{"a": [1, 2]}', status_code=200)
        assert result.get("a.1").value == 2
        assert result.status_code == 200

    def test_parse_rejects_nan_and_infinity(self):
        for text in ('{"a": NaN}', "Infinity", "[-Infinity]"):
            with pytest.raises(ValueError, match="not valid JSON"):
                JsonResult.parse(text)

    def test_equality(self):
        assert JsonResult({"a": 1}) == JsonResult({"a": 1})
        assert JsonResult({"a": 1}) != JsonResult({"a": 2})

    def test_repr_missing(self):
        assert "missing" in repr(JsonResult().get("x"))
