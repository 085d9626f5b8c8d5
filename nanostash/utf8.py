"""Incremental UTF-8 decoding and the integer hash used by glyph lookup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

UTF8_ACCEPT = 0
UTF8_REJECT = 12

_MASK32 = 0xFFFFFFFF
_CLASS_COUNT = 12

# Decoder states, spaced by the number of byte classes.
_NEED_ONE = 24        # one continuation byte left
_NEED_TWO = 36        # two continuation bytes left
_AFTER_E0 = 48        # next byte must be A0..BF
_AFTER_ED = 60        # next byte must be 80..9F (no surrogates)
_AFTER_F0 = 72        # next byte must be 90..BF
_NEED_THREE = 84      # three continuation bytes left
_AFTER_F4 = 96        # next byte must be 80..8F (no codepoints above U+10FFFF)
_STATE_COUNT = 9

# Byte classes: continuation bytes are split by range so that the
# overlong and out-of-range checks can tell them apart.
_CONT_80_8F = 1
_CONT_90_9F = 9
_CONT_A0_BF = 7
_CONTINUATIONS = (_CONT_80_8F, _CONT_90_9F, _CONT_A0_BF)

_BYTE_RANGES = (
    (0x00, 0x7F, 0),
    (0x80, 0x8F, _CONT_80_8F),
    (0x90, 0x9F, _CONT_90_9F),
    (0xA0, 0xBF, _CONT_A0_BF),
    (0xC0, 0xC1, 8),
    (0xC2, 0xDF, 2),
    (0xE0, 0xE0, 10),
    (0xE1, 0xEC, 3),
    (0xED, 0xED, 4),
    (0xEE, 0xEF, 3),
    (0xF0, 0xF0, 11),
    (0xF1, 0xF3, 6),
    (0xF4, 0xF4, 5),
    (0xF5, 0xFF, 8),
)

_TRANSITIONS = {
    UTF8_ACCEPT: {
        0: UTF8_ACCEPT,
        2: _NEED_ONE,
        3: _NEED_TWO,
        4: _AFTER_ED,
        5: _AFTER_F4,
        6: _NEED_THREE,
        10: _AFTER_E0,
        11: _AFTER_F0,
    },
    _NEED_ONE: dict.fromkeys(_CONTINUATIONS, UTF8_ACCEPT),
    _NEED_TWO: dict.fromkeys(_CONTINUATIONS, _NEED_ONE),
    _AFTER_E0: {_CONT_A0_BF: _NEED_ONE},
    _AFTER_ED: dict.fromkeys((_CONT_80_8F, _CONT_90_9F), _NEED_ONE),
    _AFTER_F0: dict.fromkeys((_CONT_90_9F, _CONT_A0_BF), _NEED_TWO),
    _NEED_THREE: dict.fromkeys(_CONTINUATIONS, _NEED_TWO),
    _AFTER_F4: {_CONT_80_8F: _NEED_TWO},
}


def _build_classes() -> bytes:
    classes = bytearray(256)
    for low, high, kind in _BYTE_RANGES:
        classes[low:high + 1] = bytes([kind]) * (high - low + 1)
    return bytes(classes)


def _build_transitions() -> bytes:
    table = bytearray([UTF8_REJECT]) * (_STATE_COUNT * _CLASS_COUNT)
    for state, moves in _TRANSITIONS.items():
        for kind, target in moves.items():
            table[state + kind] = target
    return bytes(table)


_BYTE_CLASS = _build_classes()
_NEXT_STATE = _build_transitions()


def decode_step(state: int, codepoint: int, byte: int) -> tuple[int, int]:
    """Feed one byte to the decoder; return the new (state, codepoint).

    A codepoint is complete when the returned state is UTF8_ACCEPT.
    Once UTF8_REJECT is reached the decoder stays there.
    """
    kind = _BYTE_CLASS[byte]
    if state != UTF8_ACCEPT:
        codepoint = ((byte & 0x3F) | (codepoint << 6)) & _MASK32
    else:
        codepoint = (0xFF >> kind) & byte
    return _NEXT_STATE[state + kind], codepoint


def iter_codepoints(data: Iterable[int]) -> Iterator[int]:
    """Yield every complete codepoint decoded from a byte sequence."""
    state = UTF8_ACCEPT
    codepoint = 0
    for byte in data:
        state, codepoint = decode_step(state, codepoint, byte)
        if state == UTF8_ACCEPT:
            yield codepoint


def hash_int(a: int) -> int:
    """Mix the bits of a 32-bit unsigned integer."""
    a &= _MASK32
    a = (a + (~(a << 15) & _MASK32)) & _MASK32
    a ^= a >> 10
    a = (a + (a << 3)) & _MASK32
    a ^= a >> 6
    a = (a + (~(a << 11) & _MASK32)) & _MASK32
    a ^= a >> 16
    return a