"""Drawing, measuring and iterating UTF-8 text through a font stash."""

from __future__ import annotations

from collections.abc import Iterator

from .stash import (
    VERTEX_COUNT,
    Align,
    Font,
    FontStash,
    GlyphBitmap,
    Origin,
    Quad,
    _short,
)
from .utf8 import iter_codepoints

Bounds = tuple[float, float, float, float]


def _encode(text: str | bytes) -> bytes:
    if isinstance(text, (bytes, bytearray, memoryview)):
        return bytes(text)
    return text.encode("utf-8")


def _emit_quad(stash: FontStash, quad: Quad, color: int) -> None:
    if stash.vertex_count + 6 > VERTEX_COUNT:
        stash.flush()
    stash.add_vertex(quad.x0, quad.y0, quad.s0, quad.t0, color)
    stash.add_vertex(quad.x1, quad.y1, quad.s1, quad.t1, color)
    stash.add_vertex(quad.x1, quad.y0, quad.s1, quad.t0, color)

    stash.add_vertex(quad.x0, quad.y0, quad.s0, quad.t0, color)
    stash.add_vertex(quad.x0, quad.y1, quad.s0, quad.t1, color)
    stash.add_vertex(quad.x1, quad.y1, quad.s1, quad.t1, color)


def _align_x(stash: FontStash, x: float, y: float, text: bytes, align: Align) -> float:
    """Move the pen left for right or centre aligned text."""
    if align & Align.LEFT:
        return x
    if align & Align.RIGHT:
        width, _ = text_bounds(stash, x, y, text)
        return x - width
    if align & Align.CENTER:
        width, _ = text_bounds(stash, x, y, text)
        return x - width * 0.5
    return x


def draw_text(stash: FontStash, x: float, y: float, text: str | bytes) -> float:
    """Queue the glyphs of *text* for drawing and return the pen x after it."""
    state = stash.state()
    font = stash.current_font()
    if font is None:
        return x
    data = _encode(text)
    isize = _short(state.size * 10.0)
    iblur = _short(state.blur)
    scale = font.face.pixel_height_scale(isize / 10.0)

    x = _align_x(stash, x, y, data, state.align)
    y += stash.vert_align(font, state.align, isize)

    prev_glyph_index = -1
    for codepoint in iter_codepoints(data):
        glyph = stash.get_glyph(font, codepoint, isize, iblur, GlyphBitmap.REQUIRED)
        if glyph is not None:
            quad, x = stash.get_quad(font, prev_glyph_index, glyph, scale, state.spacing, x, y)
            _emit_quad(stash, quad, state.color)
        prev_glyph_index = glyph.index if glyph is not None else -1
    stash.flush()
    return x


def text_bounds(
    stash: FontStash, x: float, y: float, text: str | bytes
) -> tuple[float, Bounds | None]:
    """Return the advance of *text* and its bounds (minx, miny, maxx, maxy).

    Without a valid font the advance is 0.0 and the bounds are None.
    """
    state = stash.state()
    font = stash.current_font()
    if font is None:
        return 0.0, None
    data = _encode(text)
    isize = _short(state.size * 10.0)
    iblur = _short(state.blur)
    scale = font.face.pixel_height_scale(isize / 10.0)

    y += stash.vert_align(font, state.align, isize)

    minx = maxx = x
    miny = maxy = y
    startx = x
    top_left = bool(stash.params.flags & Origin.ZERO_TOPLEFT)

    prev_glyph_index = -1
    for codepoint in iter_codepoints(data):
        glyph = stash.get_glyph(font, codepoint, isize, iblur, GlyphBitmap.OPTIONAL)
        if glyph is not None:
            quad, x = stash.get_quad(font, prev_glyph_index, glyph, scale, state.spacing, x, y)
            minx = min(minx, quad.x0)
            maxx = max(maxx, quad.x1)
            if top_left:
                miny = min(miny, quad.y0)
                maxy = max(maxy, quad.y1)
            else:
                miny = min(miny, quad.y1)
                maxy = max(maxy, quad.y0)
        prev_glyph_index = glyph.index if glyph is not None else -1

    advance = x - startx

    if state.align & Align.LEFT:
        pass
    elif state.align & Align.RIGHT:
        minx -= advance
        maxx -= advance
    elif state.align & Align.CENTER:
        minx -= advance * 0.5
        maxx -= advance * 0.5

    return advance, (minx, miny, maxx, maxy)


def vert_metrics(stash: FontStash) -> tuple[float, float, float] | None:
    """Return (ascender, descender, line height) in pixels, or None without a font."""
    font = stash.current_font()
    if font is None:
        return None
    size = _short(stash.state().size * 10.0) / 10.0
    return font.ascender * size, font.descender * size, font.lineh * size


def line_bounds(stash: FontStash, y: float) -> tuple[float, float] | None:
    """Return the (miny, maxy) of a line drawn at *y*, or None without a font."""
    state = stash.state()
    font = stash.current_font()
    if font is None:
        return None
    isize = _short(state.size * 10.0)
    size = isize / 10.0
    y += stash.vert_align(font, state.align, isize)

    if stash.params.flags & Origin.ZERO_TOPLEFT:
        miny = y - font.ascender * size
        maxy = miny + font.lineh * size
    else:
        maxy = y + font.descender * size
        miny = maxy - font.lineh * size
    return miny, maxy


def draw_debug(stash: FontStash, x: float, y: float) -> None:
    """Draw the atlas texture and its skyline at (x, y)."""
    w, h = stash.atlas_size()
    u = 0.0 if w == 0 else 1.0 / w
    v = 0.0 if h == 0 else 1.0 / h

    if stash.vertex_count + 12 > VERTEX_COUNT:
        stash.flush()

    background = 0x0FFFFFFF
    stash.add_vertex(x, y, u, v, background)
    stash.add_vertex(x + w, y + h, u, v, background)
    stash.add_vertex(x + w, y, u, v, background)
    stash.add_vertex(x, y, u, v, background)
    stash.add_vertex(x, y + h, u, v, background)
    stash.add_vertex(x + w, y + h, u, v, background)

    white = 0xFFFFFFFF
    stash.add_vertex(x, y, 0, 0, white)
    stash.add_vertex(x + w, y + h, 1, 1, white)
    stash.add_vertex(x + w, y, 1, 0, white)
    stash.add_vertex(x, y, 0, 0, white)
    stash.add_vertex(x, y + h, 0, 1, white)
    stash.add_vertex(x + w, y + h, 1, 1, white)

    skyline = 0xC00000FF
    for node in stash.atlas.nodes:
        if stash.vertex_count + 6 > VERTEX_COUNT:
            stash.flush()
        nx = x + node.x
        ny = y + node.y
        stash.add_vertex(nx, ny, u, v, skyline)
        stash.add_vertex(nx + node.width, ny + 1, u, v, skyline)
        stash.add_vertex(nx + node.width, ny, u, v, skyline)
        stash.add_vertex(nx, ny, u, v, skyline)
        stash.add_vertex(nx, ny + 1, u, v, skyline)
        stash.add_vertex(nx + node.width, ny + 1, u, v, skyline)

    stash.flush()


class TextIterator:
    """Walk the glyphs of a string, yielding one quad (or None) per codepoint.

    After each step ``x``/``y`` hold the pen position of the glyph just
    produced, ``nextx``/``nexty`` the position of the next one and
    ``codepoint`` the decoded character.
    """

    def __init__(
        self,
        stash: FontStash,
        x: float,
        y: float,
        text: str | bytes,
        bitmap_option: GlyphBitmap = GlyphBitmap.REQUIRED,
    ) -> None:
        state = stash.state()
        font = stash.current_font()
        if font is None:
            raise ValueError("no valid font selected")
        data = _encode(text)
        self.stash = stash
        self.font: Font = font
        self.isize = _short(state.size * 10.0)
        self.iblur = _short(state.blur)
        self.scale = font.face.pixel_height_scale(self.isize / 10.0)

        x = _align_x(stash, x, y, data, state.align)
        y += stash.vert_align(font, state.align, self.isize)

        self.x = self.nextx = x
        self.y = self.nexty = y
        self.spacing = state.spacing
        self.codepoint = 0
        self.prev_glyph_index = -1
        self.bitmap_option = bitmap_option
        self._codepoints = iter_codepoints(data)

    def __iter__(self) -> Iterator[Quad | None]:
        return self

    def __next__(self) -> Quad | None:
        self.codepoint = next(self._codepoints)
        self.x = self.nextx
        self.y = self.nexty
        glyph = self.stash.get_glyph(
            self.font, self.codepoint, self.isize, self.iblur, self.bitmap_option
        )
        quad = None
        if glyph is not None:
            quad, self.nextx = self.stash.get_quad(
                self.font,
                self.prev_glyph_index,
                glyph,
                self.scale,
                self.spacing,
                self.nextx,
                self.nexty,
            )
        self.prev_glyph_index = glyph.index if glyph is not None else -1
        return quad