from __future__ import annotations

from collections.abc import Iterable, Iterator


def utf8_len(ch: str) -> int:
    cp = ord(ch)
    if cp < 0x80:
        return 1
    if cp < 0x800:
        return 2
    if cp < 0x10000:
        return 3
    return 4


def utf16_len(ch: str) -> int:
    return 2 if ord(ch) > 0xFFFF else 1


def _code_points(s: str) -> Iterator[tuple[int, int, int]]:
    # (byte start, utf8 length, utf16 offset before this code point)
    byte_idx = 0
    u16_offset = 0
    for ch in s:
        ch8_len = utf8_len(ch)
        yield byte_idx, ch8_len, u16_offset
        byte_idx += ch8_len
        u16_offset += utf16_len(ch)


def utf16_index_bytes_slice(s: str, offsets: Iterable[int]) -> dict[int, int]:
    """Map byte offsets into ``s`` to UTF-16 code unit offsets in one pass.

    Offsets may be unsorted and may repeat; the result holds one entry per
    unique offset, in ascending order. An offset that is not a code point
    boundary maps to the UTF-16 offset of the next boundary.

    Raises IndexError for an offset outside ``[0, len(s.encode())]``.
    """
    size = sum(utf8_len(ch) for ch in s)
    total_u16 = sum(utf16_len(ch) for ch in s)
    indices = sorted(set(offsets))
    if indices and (indices[0] < 0 or indices[-1] > size):
        bad = indices[0] if indices[0] < 0 else indices[-1]
        raise IndexError(f"byte offset {bad} out of range for string of {size} bytes")

    ret: dict[int, int] = {}
    indices_iter = iter(indices)
    char_iter = _code_points(s)
    # (boundary, utf16 offset): the code point last found past its query.
    # Later queries up to that boundary land in the same gap and share it.
    residual: tuple[int, int] | None = None

    for idx8 in indices_iter:
        if idx8 == size:
            ret[idx8] = total_u16
            break

        if residual is not None and idx8 <= residual[0]:
            ret[idx8] = residual[1]
            continue

        found = next((cp for cp in char_iter if cp[0] >= idx8), None)
        if found is None:
            # Walked past the last code point; everything left is at the end.
            ret[idx8] = total_u16
            for rest in indices_iter:
                ret[rest] = total_u16
            break

        byte_idx, _, u16_offset = found
        ret[idx8] = u16_offset
        if byte_idx > idx8:
            residual = (byte_idx, u16_offset)
        else:
            residual = None

    return ret


def utf16_index_bytes(s: str, i: int) -> int:
    """Convert a single UTF-8 byte offset to a UTF-16 offset."""
    return utf16_index_bytes_slice(s, (i,))[i]


def utf16_index_chars(s: str, n: int) -> int:
    """UTF-16 length of the first ``n`` characters of ``s``."""
    return sum(utf16_len(ch) for ch in s[:n])
