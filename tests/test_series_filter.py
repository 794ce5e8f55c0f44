"""Unit tests for top-N baseline series selection."""

from __future__ import annotations

import pytest

from analysis.series_filter import TOP_SERIES_LIMIT, Series, SeriesPayloadError, compare_by_baseline, top_series

pytestmark = pytest.mark.unit


def _series(label: str, *points: tuple[float, float]) -> Series:
    return Series(data=tuple(points), label=label)


def test_top_series_ranks_by_first_point_descending() -> None:
    """Keep the four highest baselines; an empty series ranks last."""

    a = _series("A", (0, 5))
    b = _series("B", (0, 9))
    c = _series("C")
    d = _series("D", (0, 1))
    e = _series("E", (0, 20))

    assert top_series([a, b, c, d, e]) == [e, b, a, d]


def test_top_series_ranks_on_first_point_only() -> None:
    """Later points do not affect ranking."""

    low_start = _series("low", (0, 1), (1, 1000))
    high_start = _series("high", (0, 10), (1, 0))
    assert top_series([low_start, high_start]) == [high_start, low_start]


def test_top_series_keeps_empty_series_in_input_order() -> None:
    """Empty series compare equal, so the stable sort keeps their order."""

    first = _series("first")
    second = _series("second")
    assert top_series([first, second]) == [first, second]
    assert top_series([second, first]) == [second, first]


def test_top_series_is_bounded_and_does_not_mutate_input() -> None:
    """Never return more than the limit or more than given; input is untouched."""

    candidates = [_series(str(i), (0, i)) for i in range(10)]
    snapshot = list(candidates)

    selected = top_series(candidates)
    assert len(selected) == TOP_SERIES_LIMIT
    assert candidates == snapshot
    assert top_series(candidates[:2]) == [candidates[1], candidates[0]]
    assert top_series([]) == []


def test_top_series_is_idempotent_on_its_output() -> None:
    """Re-filtering an already filtered list changes nothing."""

    candidates = [_series(str(i), (0, (i * 7) % 5)) for i in range(8)] + [_series("empty")]
    once = top_series(candidates)
    assert top_series(once) == once


def test_compare_by_baseline_edge_cases() -> None:
    """Empty vs empty is equal; empty vs non-empty puts the non-empty first."""

    empty = _series("empty")
    full = _series("full", (0, 3))
    assert compare_by_baseline(empty, _series("other")) == 0
    assert compare_by_baseline(empty, full) == 1
    assert compare_by_baseline(full, empty) == -1
    assert compare_by_baseline(_series("x", (0, 2)), full) == 1


def test_series_from_payload_accepts_lists_and_strings() -> None:
    """Wire payloads may carry dimension metadata as JSON text or lists."""

    from_lists = Series.from_payload({"data": [[1, 2]], "dimensions": ["US"], "dimensionNames": ["country"]})
    from_text = Series.from_payload({"data": [[1, 2]], "dimensions": '["US"]', "dimensionNames": '["country"]'})

    assert from_lists == from_text
    assert from_lists.data == ((1, 2),)
    assert from_lists.baseline == 2


def test_null_first_value_ranks_as_zero_not_empty() -> None:
    """A first point with a null y is present; it compares as zero."""

    negative = _series("neg", (0, -5))
    null_first = _series("nul", (0, None), (1, 100))

    assert null_first.baseline == 0
    assert [s.label for s in top_series([negative, null_first])] == ["nul", "neg"]
    assert compare_by_baseline(null_first, _series("empty")) == -1


@pytest.mark.parametrize(
    "payload",
    [
        {"data": [[]]},
        {"data": [[0]]},
        {"data": [[0, "7"]]},
        {"data": [["0", 1]]},
        {"data": [[0, True]]},
        {"data": {"x": 1}},
        {"data": [[0, 1]], "dimensions": {"0": "US"}},
    ],
)
def test_series_from_payload_rejects_malformed_input(payload) -> None:
    """Malformed points and metadata raise one domain error."""

    with pytest.raises(SeriesPayloadError):
        Series.from_payload(payload)


def test_series_from_payload_keeps_null_values() -> None:
    series = Series.from_payload({"data": [[0, None], [1, 2.5]]})

    assert series.data == ((0, None), (1, 2.5))


def test_dimension_pairs_requires_json_lists() -> None:
    """Metadata that decodes to anything but a list is rejected."""

    assert Series(dimensions='["US"]', dimension_names='["country", "device"]').dimension_pairs() == [
        ("country", "US"),
        ("device", None),
    ]
    with pytest.raises(SeriesPayloadError):
        Series(dimensions='{"0": "US"}', dimension_names='["country"]').dimension_pairs()
    with pytest.raises(SeriesPayloadError):
        Series(dimensions='["US"]', dimension_names='"country"').dimension_pairs()
    with pytest.raises(SeriesPayloadError):
        Series(dimensions="not json", dimension_names='["country"]').dimension_pairs()
