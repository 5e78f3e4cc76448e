"""Tests for CallOptions validation."""

import pytest

from aisql.domain.errors import InvalidCallError
from aisql.domain.value_objects.call_options import CallOptions
from aisql.domain.value_objects.enums import AIFunction, ParseMode


def test_empty_options():
    opts = CallOptions.from_mapping(AIFunction.COMPLETE, None)
    assert opts.as_dict() == {}
    assert not opts
    assert not opts.guarded


def test_complete_options():
    opts = CallOptions.from_mapping(
        AIFunction.COMPLETE, {"temperature": 0.3, "max_tokens": 500, "guard_enable": True}
    )
    assert opts.as_dict() == {"temperature": 0.3, "max_tokens": 500, "guard_enable": True}
    assert opts.guarded


def test_parse_document_mode_normalized():
    opts = CallOptions.from_mapping(AIFunction.PARSE_DOCUMENT, {"mode": "layout", "page_split": True})
    assert opts.mode == ParseMode.LAYOUT
    assert opts.as_dict() == {"mode": "LAYOUT", "page_split": True}


def test_unknown_mode():
    with pytest.raises(InvalidCallError, match="parse mode"):
        CallOptions.from_mapping(AIFunction.PARSE_DOCUMENT, {"mode": "HANDWRITING"})


def test_option_not_accepted_by_function():
    with pytest.raises(InvalidCallError, match="not accepted"):
        CallOptions.from_mapping(AIFunction.SENTIMENT, {"temperature": 0.5})
    with pytest.raises(InvalidCallError, match="not accepted"):
        CallOptions.from_mapping(AIFunction.PARSE_DOCUMENT, {"guard_enable": True})


@pytest.mark.parametrize("options", [
    {"temperature": 1.5},
    {"temperature": -0.1},
    {"top_p": 2},
    {"max_tokens": 0},
    {"max_tokens": 10_000},
    {"max_tokens": 12.5},
    {"temperature": "hot"},
    {"guard_enable": "yes"},
])
def test_out_of_range_values(options):
    with pytest.raises(InvalidCallError):
        CallOptions.from_mapping(AIFunction.COMPLETE, options)


def test_boundaries_accepted():
    opts = CallOptions.from_mapping(
        AIFunction.COMPLETE, {"temperature": 0, "top_p": 1, "max_tokens": 8192}
    )
    assert opts.max_tokens == 8192
