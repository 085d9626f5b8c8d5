import pytest

from nanostash.blur import blur


def _square(size=9, value=255):
    data = bytearray(size * size)
    for y in range(2, size - 2):
        for x in range(2, size - 2):
            data[y * size + x] = value
    return data


@pytest.mark.parametrize("radius", [0, -3])
def test_small_radius_leaves_data_unchanged(radius):
    data = _square()
    original = bytes(data)
    blur(data, 0, 9, 9, 9, radius)
    assert bytes(data) == original


def test_border_is_zero_after_blur():
    size = 9
    data = bytearray(b"\xff" * size * size)
    blur(data, 0, size, size, size, 2)
    for i in range(size):
        assert data[i] == 0
        assert data[(size - 1) * size + i] == 0
        assert data[i * size] == 0
        assert data[i * size + size - 1] == 0


def test_impulse_spreads_to_neighbours():
    size = 11
    data = bytearray(size * size)
    centre = 5 * size + 5
    data[centre] = 255
    blur(data, 0, size, size, size, 3)
    assert data[centre] < 255
    assert data[centre + 1] > 0
    assert data[centre - size] > 0


def test_values_never_exceed_original_maximum():
    data = _square(value=200)
    blur(data, 0, 9, 9, 9, 4)
    assert max(data) <= 200


def test_only_region_is_touched():
    stride = 12
    data = bytearray(b"\x80" * stride * 12)
    offset = 2 * stride + 3
    blur(data, offset, 6, 5, stride, 2)
    for y in range(12):
        for x in range(stride):
            inside = 2 <= y < 7 and 3 <= x < 9
            if not inside:
                assert data[y * stride + x] == 0x80


def test_single_pixel_region():
    data = bytearray(b"\x10\x20\x30")
    blur(data, 1, 1, 1, 3, 2)
    assert data == bytearray(b"\x10\x00\x30")