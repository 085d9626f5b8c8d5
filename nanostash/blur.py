"""Exponential blur applied in place to a region of an 8-bit texture."""

from __future__ import annotations

import math

_APREC = 16
_ZPREC = 7


def _smooth(data: bytearray, indices: range, alpha: int) -> None:
    z = 0
    for i in indices:
        z += (alpha * ((data[i] << _ZPREC) - z)) >> _APREC
        data[i] = (z >> _ZPREC) & 0xFF


def _blur_cols(data: bytearray, offset: int, w: int, h: int, stride: int, alpha: int) -> None:
    for y in range(h):
        row = offset + y * stride
        _smooth(data, range(row + 1, row + w), alpha)
        data[row + w - 1] = 0
        _smooth(data, range(row + w - 2, row - 1, -1), alpha)
        data[row] = 0


def _blur_rows(data: bytearray, offset: int, w: int, h: int, stride: int, alpha: int) -> None:
    for x in range(w):
        col = offset + x
        _smooth(data, range(col + stride, col + h * stride, stride), alpha)
        data[col + (h - 1) * stride] = 0
        _smooth(data, range(col + (h - 2) * stride, col - 1, -stride), alpha)
        data[col] = 0


def blur(data: bytearray, offset: int, width: int, height: int, stride: int, radius: int) -> None:
    """Blur the width*height block starting at *offset* of a texture with row *stride*.

    A radius below 1 leaves the data untouched. The border of the block is forced to zero.
    """
    if radius < 1:
        return
    # Choose alpha so that 90% of the kernel lies within the radius.
    sigma = radius * 0.57735
    alpha = int((1 << _APREC) * (1.0 - math.exp(-2.3 / (sigma + 1.0))))
    _blur_rows(data, offset, width, height, stride, alpha)
    _blur_cols(data, offset, width, height, stride, alpha)
    _blur_rows(data, offset, width, height, stride, alpha)
    _blur_cols(data, offset, width, height, stride, alpha)