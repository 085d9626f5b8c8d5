"""Skyline bin packer used to place glyph bitmaps in a texture atlas."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AtlasNode:
    """One horizontal segment of the skyline."""

    x: int
    y: int
    width: int


@dataclass
class Atlas:
    """A rectangular area packed with a bottom-left skyline heuristic."""

    width: int
    height: int
    nodes: list[AtlasNode] = field(init=False)

    def __post_init__(self) -> None:
        self.nodes = [AtlasNode(0, 0, self.width)]

    def _rect_fits(self, index: int, w: int, h: int) -> int | None:
        """Return the y at which a w*h block rests on span *index*, or None."""
        x = self.nodes[index].x
        y = self.nodes[index].y
        if x + w > self.width:
            return None
        space_left = w
        for node in self.nodes[index:]:
            if space_left <= 0:
                break
            y = max(y, node.y)
            if y + h > self.height:
                return None
            space_left -= node.width
        if space_left > 0:
            return None
        return y

    def _add_skyline_level(self, index: int, x: int, y: int, w: int, h: int) -> None:
        self.nodes.insert(index, AtlasNode(x, y + h, w))

        # Trim segments that fall under the shadow of the new one.
        i = index + 1
        while i < len(self.nodes):
            prev = self.nodes[i - 1]
            node = self.nodes[i]
            edge = prev.x + prev.width
            if node.x >= edge:
                break
            shrink = edge - node.x
            node.x += shrink
            node.width -= shrink
            if node.width > 0:
                break
            del self.nodes[i]

        # Merge neighbouring segments of equal height.
        i = 0
        while i < len(self.nodes) - 1:
            if self.nodes[i].y == self.nodes[i + 1].y:
                self.nodes[i].width += self.nodes[i + 1].width
                del self.nodes[i + 1]
            else:
                i += 1

    def add_rect(self, rw: int, rh: int) -> tuple[int, int] | None:
        """Reserve an rw*rh area and return its (x, y), or None if it does not fit."""
        best_h = self.height
        best_w = self.width
        best: tuple[int, int, int] | None = None

        for index, node in enumerate(self.nodes):
            y = self._rect_fits(index, rw, rh)
            if y is None:
                continue
            if y + rh < best_h or (y + rh == best_h and node.width < best_w):
                best = (index, node.x, y)
                best_w = node.width
                best_h = y + rh

        if best is None:
            return None
        index, x, y = best
        self._add_skyline_level(index, x, y, rw, rh)
        return x, y

    def expand(self, width: int, height: int) -> None:
        """Grow the atlas, keeping what is already packed."""
        if width > self.width:
            self.nodes.append(AtlasNode(self.width, 0, width - self.width))
        self.width = width
        self.height = height

    def reset(self, width: int, height: int) -> None:
        """Forget every packed rectangle and take a new size."""
        self.width = width
        self.height = height
        self.nodes = [AtlasNode(0, 0, width)]