# tests/modules/sales/test_sales_service.py
import pytest

from avocado_api.modules.sales.services import build_filters, find_missing_fields, parse_record_id


def test_build_filters_only_keeps_given_values():
    assert build_filters() == {}
    assert build_filters(date="2015-12-27") == {"date": "2015-12-27"}
    assert build_filters(region="Albany", date="") == {"region": "Albany"}
    assert build_filters(date="2015-12-27", region="Albany") == {"date": "2015-12-27", "region": "Albany"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1", 1),
        (" 42 ", 42),
        ("-3", -3),
        ("7.0", 7),
        ("1e2", 100),
        ("1.5", None),
        ("abc", None),
        ("", None),
        ("inf", None),
        ("nan", None),
        ("1_000", None),
        ("\u0661\u0662", None),
        ("0x10", None),
        ("99999999999999999999", None),
        ("1e20", None),
        ("1e999", None),
        ("9223372036854775807", 2**63 - 1),
        ("-9223372036854775808", -(2**63)),
    ],
)
def test_parse_record_id(raw, expected):
    assert parse_record_id(raw) == expected


def test_find_missing_fields_treats_falsy_as_missing(record_payload):
    record_payload.update(totalVolume=0, region="", smallBags=None)
    del record_payload["date"]
    assert find_missing_fields(record_payload) == ["date", "region", "totalVolume", "smallBags"]


def test_find_missing_fields_presence_mode_accepts_zero(record_payload):
    record_payload.update(totalVolume=0, xLargeBags=0.0, region="")
    assert find_missing_fields(record_payload, allow_zero=True) == ["region"]


def test_find_missing_fields_complete_payload(record_payload):
    assert find_missing_fields(record_payload) == []
