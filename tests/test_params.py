from __future__ import annotations

import pytest

from tools._params import (
    ParamError,
    optional_int,
    optional_param,
    optional_string_array,
    pagination_params,
    required_int,
    required_param,
    with_pagination,
)


def test_required_param_returns_value():
    assert required_param({"owner": "octo"}, "owner", str) == "octo"


@pytest.mark.parametrize("args", [{}, {"owner": None}, {"owner": ""}])
def test_required_param_treats_absent_and_empty_as_missing(args):
    with pytest.raises(ParamError, match="missing required parameter: owner"):
        required_param(args, "owner", str)


def test_required_param_rejects_wrong_type():
    with pytest.raises(ParamError, match="parameter owner is not of type string"):
        required_param({"owner": 3}, "owner", str)


def test_optional_param_rejects_int_for_bool_and_bool_for_int():
    with pytest.raises(ParamError):
        optional_param({"replace_parent": 1}, "replace_parent", bool, False)
    with pytest.raises(ParamError):
        optional_int({"page": True}, "page")


def test_optional_param_falls_back_to_default():
    assert optional_param({}, "replace_parent", bool, False) is False
    assert optional_param({"replace_parent": True}, "replace_parent", bool, False) is True


def test_integers_accept_whole_floats_from_json():
    assert required_int({"issue_number": 12.0}, "issue_number") == 12
    with pytest.raises(ParamError, match="not of type integer"):
        required_int({"issue_number": 12.5}, "issue_number")


def test_required_int_treats_zero_as_missing():
    with pytest.raises(ParamError, match="missing required parameter: sub_issue_id"):
        required_int({"sub_issue_id": 0}, "sub_issue_id")


def test_optional_string_array_shapes():
    assert optional_string_array({}, "labels") == []
    assert optional_string_array({"labels": "bug"}, "labels") == ["bug"]
    assert optional_string_array({"labels": ["a", "b"]}, "labels") == ["a", "b"]
    with pytest.raises(ParamError, match="labels must be an array of strings"):
        optional_string_array({"labels": ["a", 2]}, "labels")


def test_pagination_defaults():
    pagination = pagination_params({})

    assert pagination.to_params() == {"page": 1, "per_page": 30}


def test_pagination_reads_the_named_per_page_key():
    assert pagination_params({"per_page": 7}, per_page_key="per_page").per_page == 7
    # the other spelling is ignored
    assert pagination_params({"perPage": 7}, per_page_key="per_page").per_page == 30


@pytest.mark.parametrize(
    "args, message",
    [
        ({"page": 0}, "page must be greater than or equal to 1"),
        ({"page": -2}, "page must be greater than or equal to 1"),
        ({"perPage": 0}, "perPage must be between 1 and 100"),
        ({"perPage": 101}, "perPage must be between 1 and 100"),
    ],
)
def test_pagination_bounds(args, message):
    with pytest.raises(ParamError) as excinfo:
        pagination_params(args)

    assert str(excinfo.value) == message


def test_with_pagination_schema_uses_the_given_key():
    schema = with_pagination("per_page")

    assert set(schema) == {"page", "per_page"}
    assert schema["per_page"]["maximum"] == 100
