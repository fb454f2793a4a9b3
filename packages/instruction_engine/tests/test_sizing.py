from __future__ import annotations

import pytest

from instruction_engine.budget.sizing import (
    LineMeter,
    TokenMeter,
    estimate_tokens,
    meter_for_unit,
)


def test_line_meter_measures_lines() -> None:
    meter = LineMeter()
    assert meter.measure("") == 0
    assert meter.measure("one") == 1
    assert meter.measure("one\ntwo\n") == 2


def test_line_meter_no_truncation() -> None:
    result = LineMeter().truncate("a\nb", 5)
    assert not result.truncated
    assert result.text == "a\nb"
    assert result.truncated_size == 2


def test_line_meter_truncates_with_marker() -> None:
    result = LineMeter(marker="[cut]").truncate("a\nb\nc\nd", 3)
    assert result.truncated
    assert result.text == "a\nb\n[cut]"
    assert result.original_size == 4
    assert result.truncated_size == 3


def test_line_meter_single_line_allowance_skips_marker() -> None:
    result = LineMeter().truncate("a\nb\nc", 1)
    assert result.text == "a"
    assert result.truncated_size == 1


def test_line_meter_zero_limit() -> None:
    result = LineMeter().truncate("a\nb", 0)
    assert result.truncated
    assert result.text == ""


def test_token_estimate() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("ab") == 1
    assert estimate_tokens("abcd" * 10) == 10


def test_token_meter_truncates_within_limit() -> None:
    meter = TokenMeter()
    result = meter.truncate("x" * 100, 5)
    assert result.truncated
    assert result.text.endswith("[truncated]")
    assert meter.measure(result.text) <= 5
    assert result.original_size == 25


def test_token_meter_marker_longer_than_allowance() -> None:
    result = TokenMeter(marker="[this marker is long]").truncate("x" * 100, 2)
    assert result.text == "x" * 8
    assert result.truncated_size == 2


def test_meter_for_unit() -> None:
    assert isinstance(meter_for_unit("lines"), LineMeter)
    assert isinstance(meter_for_unit("tokens"), TokenMeter)
    with pytest.raises(ValueError, match="Unknown size unit"):
        meter_for_unit("bytes")
