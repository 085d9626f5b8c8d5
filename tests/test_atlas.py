import random

import pytest

from nanostash.atlas import Atlas, AtlasNode


def _check_skyline(atlas):
    x = 0
    for node in atlas.nodes:
        assert node.x == x
        assert node.width > 0
        assert 0 <= node.y <= atlas.height
        x += node.width
    assert x == atlas.width
    for left, right in zip(atlas.nodes, atlas.nodes[1:]):
        assert left.y != right.y


def _overlaps(a, b):
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def test_new_atlas_has_single_root_node():
    atlas = Atlas(64, 32)
    assert atlas.nodes == [AtlasNode(0, 0, 64)]


def test_first_rect_goes_to_origin():
    atlas = Atlas(100, 100)
    assert atlas.add_rect(10, 10) == (0, 0)
    assert atlas.nodes == [AtlasNode(0, 10, 10), AtlasNode(10, 0, 90)]


def test_bottom_left_prefers_lower_spot():
    atlas = Atlas(100, 100)
    atlas.add_rect(10, 10)
    assert atlas.add_rect(10, 5) == (10, 0)
    _check_skyline(atlas)


def test_equal_height_segments_merge():
    atlas = Atlas(100, 100)
    atlas.add_rect(10, 10)
    atlas.add_rect(90, 10)
    assert atlas.nodes == [AtlasNode(0, 10, 100)]


def test_too_wide_rect_is_refused():
    atlas = Atlas(100, 100)
    assert atlas.add_rect(101, 1) is None
    assert atlas.nodes == [AtlasNode(0, 0, 100)]


def test_too_tall_rect_is_refused():
    atlas = Atlas(100, 100)
    assert atlas.add_rect(1, 101) is None


def test_full_size_rect_is_refused():
    atlas = Atlas(100, 100)
    assert atlas.add_rect(100, 100) is None
    assert atlas.add_rect(100, 99) == (0, 0)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_packing_never_overlaps(seed):
    rng = random.Random(seed)
    atlas = Atlas(256, 256)
    placed = []
    for _ in range(300):
        w, h = rng.randint(1, 30), rng.randint(1, 30)
        pos = atlas.add_rect(w, h)
        if pos is None:
            continue
        x, y = pos
        assert 0 <= x and x + w <= atlas.width
        assert 0 <= y and y + h <= atlas.height
        rect = (x, y, w, h)
        assert not any(_overlaps(rect, other) for other in placed)
        placed.append(rect)
        _check_skyline(atlas)
    assert placed


def test_expand_adds_empty_segment():
    atlas = Atlas(50, 50)
    atlas.add_rect(50, 40)
    assert atlas.add_rect(20, 20) is None
    atlas.expand(100, 80)
    assert (atlas.width, atlas.height) == (100, 80)
    assert atlas.nodes[-1] == AtlasNode(50, 0, 50)
    assert atlas.add_rect(20, 20) == (50, 0)
    _check_skyline(atlas)


def test_expand_height_only_keeps_nodes():
    atlas = Atlas(50, 50)
    atlas.add_rect(10, 10)
    before = [AtlasNode(n.x, n.y, n.width) for n in atlas.nodes]
    atlas.expand(50, 90)
    assert atlas.nodes == before
    assert atlas.height == 90


def test_reset_clears_everything():
    atlas = Atlas(50, 50)
    atlas.add_rect(10, 10)
    atlas.add_rect(20, 5)
    atlas.reset(70, 30)
    assert (atlas.width, atlas.height) == (70, 30)
    assert atlas.nodes == [AtlasNode(0, 0, 70)]
    assert atlas.add_rect(5, 5) == (0, 0)