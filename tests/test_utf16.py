from __future__ import annotations

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from regexbridge import utf16_index_bytes, utf16_index_bytes_slice, utf16_index_chars


TEST_S = "x😀🤣a🤩😛🏴‍☠️🤑"
# u8 start, u8 end, u16 start, u16 end, substring
TEST_IDX: tuple[tuple[int, int, int, int, str], ...] = (
    (0, 1, 0, 1, "x"),
    (1, 5, 1, 3, "😀"),
    (5, 14, 3, 8, "🤣a🤩"),
    (18, 31, 10, 15, "🏴‍☠️"),
    (31, 35, 15, 17, "🤑"),
)


def _next_boundary_utf16(s: str, offset: int) -> int:
    data = s.encode("utf-8")
    b = offset
    while b < len(data) and (data[b] & 0xC0) == 0x80:
        b += 1
    return len(data[:b].decode("utf-8").encode("utf-16-le")) // 2


def test_single_byte_index() -> None:
    data = TEST_S.encode("utf-8")
    units = TEST_S.encode("utf-16-le")
    for s8, e8, s16_ex, e16_ex, sub in TEST_IDX:
        s16 = utf16_index_bytes(TEST_S, s8)
        e16 = utf16_index_bytes(TEST_S, e8)
        assert (s16, e16) == (s16_ex, e16_ex)
        assert data[s8:e8].decode("utf-8") == sub
        assert units[2 * s16 : 2 * e16].decode("utf-16-le") == sub


def test_batch_matches_table() -> None:
    expected = {s8: s16 for s8, _, s16, _, _ in TEST_IDX}
    expected.update({e8: e16 for _, e8, _, e16, _ in TEST_IDX})
    offsets = [s8 for s8, *_ in TEST_IDX] + [e8 for _, e8, *_ in TEST_IDX]

    res = utf16_index_bytes_slice(TEST_S, offsets)
    assert res == expected
    assert list(res) == sorted(expected)


def test_every_offset_ending_in_emoji() -> None:
    s = "xx😀"
    res = utf16_index_bytes_slice(s, range(len(s.encode()) + 1))
    assert list(res.items()) == [(0, 0), (1, 1), (2, 2), (3, 4), (4, 4), (5, 4), (6, 4)]


def test_every_offset_emoji_in_middle() -> None:
    s = "xx😀xx"
    res = utf16_index_bytes_slice(s, range(len(s.encode()) + 1))
    assert list(res.items()) == [
        (0, 0),
        (1, 1),
        (2, 2),
        (3, 4),
        (4, 4),
        (5, 4),
        (6, 4),
        (7, 5),
        (8, 6),
    ]


def test_every_offset_starting_with_emoji() -> None:
    s = "😀xx"
    res = utf16_index_bytes_slice(s, range(len(s.encode()) + 1))
    assert list(res.items()) == [(0, 0), (1, 2), (2, 2), (3, 2), (4, 2), (5, 3), (6, 4)]


def test_adjacent_multibyte_chars_batch_agrees_with_single() -> None:
    s = "😀😀"
    batch = utf16_index_bytes_slice(s, [1, 5])
    assert batch == {1: 2, 5: 4}
    assert batch[5] == utf16_index_bytes(s, 5)


def test_three_byte_chars() -> None:
    s = "a€b"
    res = utf16_index_bytes_slice(s, [0, 1, 2, 3, 4, 5])
    assert res == {0: 0, 1: 1, 2: 2, 3: 2, 4: 2, 5: 3}


def test_empty_string() -> None:
    assert utf16_index_bytes_slice("", [0, 0]) == {0: 0}
    assert utf16_index_bytes_slice("", []) == {}


def test_duplicates_and_order_are_ignored() -> None:
    assert utf16_index_bytes_slice(TEST_S, [35, 1, 35, 0, 1]) == {0: 0, 1: 1, 35: 17}


def test_out_of_range_offset_raises() -> None:
    with pytest.raises(IndexError):
        utf16_index_bytes_slice("abc", [4])
    with pytest.raises(IndexError):
        utf16_index_bytes_slice("abc", [-1])


def test_char_index() -> None:
    assert utf16_index_chars(TEST_S, 0) == 0
    assert utf16_index_chars(TEST_S, 2) == 3
    assert utf16_index_chars("ab", 10) == 2


@given(st.text(max_size=40), st.data())
@settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
def test_matches_next_boundary(s: str, data: st.DataObject) -> None:
    size = len(s.encode("utf-8"))
    offsets = data.draw(st.lists(st.integers(min_value=0, max_value=size), max_size=20))
    res = utf16_index_bytes_slice(s, offsets)
    assert set(res) == set(offsets)
    for o, u16 in res.items():
        assert u16 == _next_boundary_utf16(s, o)


@given(st.text(max_size=40), st.data())
@settings(max_examples=200)
def test_batch_equals_single_and_is_order_free(s: str, data: st.DataObject) -> None:
    size = len(s.encode("utf-8"))
    offsets = data.draw(st.lists(st.integers(min_value=0, max_value=size), max_size=20))
    shuffled = data.draw(st.permutations(offsets))

    batch = utf16_index_bytes_slice(s, offsets)
    assert utf16_index_bytes_slice(s, shuffled) == batch
    assert utf16_index_bytes_slice(s, offsets) == batch
    for o in offsets:
        assert utf16_index_bytes(s, o) == batch[o]
