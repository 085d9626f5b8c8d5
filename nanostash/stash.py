"""Glyph cache backed by a packed texture atlas, with a stack of text states."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import TracebackType

from .atlas import Atlas
from .blur import blur

VERTEX_COUNT = 1024
MAX_STATES = 20
MAX_FALLBACKS = 20
MAX_BLUR = 20
_NAME_LENGTH = 63


class Origin(enum.IntFlag):
    """Where the y axis starts."""

    ZERO_TOPLEFT = 1
    ZERO_BOTTOMLEFT = 2


class Align(enum.IntFlag):
    """Horizontal and vertical text alignment."""

    LEFT = 1 << 0
    CENTER = 1 << 1
    RIGHT = 1 << 2
    TOP = 1 << 3
    MIDDLE = 1 << 4
    BOTTOM = 1 << 5
    BASELINE = 1 << 6


class GlyphBitmap(enum.IntEnum):
    """Whether a glyph lookup must place a bitmap in the atlas."""

    OPTIONAL = 1
    REQUIRED = 2


class ErrorCode(enum.IntEnum):
    """Conditions reported through the error callback."""

    ATLAS_FULL = 1
    SCRATCH_FULL = 2
    STATES_OVERFLOW = 3
    STATES_UNDERFLOW = 4


class FontLoadError(Exception):
    """A font could not be read or initialised."""


def _short(value: float) -> int:
    """Truncate to a signed 16-bit integer."""
    v = int(value) & 0xFFFF
    return v - 0x10000 if v >= 0x8000 else v


@dataclass(frozen=True)
class GlyphBox:
    """Horizontal metrics and pixel bounding box of a scaled glyph."""

    advance: int
    lsb: int
    x0: int
    y0: int
    x1: int
    y1: int


class FontFace(ABC):
    """A loaded font able to measure and rasterise glyphs."""

    @abstractmethod
    def vmetrics(self) -> tuple[int, int, int]:
        """Return (ascent, descent, line_gap) in font units."""

    @abstractmethod
    def pixel_height_scale(self, size: float) -> float:
        """Return the scale from font units to pixels for *size*."""

    @abstractmethod
    def glyph_index(self, codepoint: int) -> int:
        """Return the glyph index of *codepoint*, 0 when missing."""

    @abstractmethod
    def build_glyph_bitmap(self, glyph: int, size: float, scale: float) -> GlyphBox:
        """Return the metrics of *glyph* rendered at *scale*."""

    @abstractmethod
    def render_glyph_bitmap(
        self,
        output: bytearray,
        offset: int,
        width: int,
        height: int,
        stride: int,
        scale_x: float,
        scale_y: float,
        glyph: int,
    ) -> None:
        """Write the coverage of *glyph* into *output* starting at *offset*."""

    @abstractmethod
    def kern_advance(self, glyph1: int, glyph2: int) -> int:
        """Return the kerning between two glyphs in font units."""


@dataclass
class Quad:
    """Screen rectangle and texture coordinates of one glyph."""

    x0: float
    y0: float
    s0: float
    t0: float
    x1: float
    y1: float
    s1: float
    t1: float


@dataclass
class Glyph:
    """A cached glyph; negative x0/y0 means no bitmap has been placed yet."""

    codepoint: int
    size: int
    blur: int
    index: int = 0
    x0: int = -1
    y0: int = -1
    x1: int = -1
    y1: int = -1
    xadv: int = 0
    xoff: int = 0
    yoff: int = 0


@dataclass
class Font:
    """A font added to the stash with its normalised vertical metrics."""

    name: str
    face: FontFace
    data: bytes
    ascender: float
    descender: float
    lineh: float
    glyphs: dict[tuple[int, int, int], Glyph] = field(default_factory=dict)
    fallbacks: list[int] = field(default_factory=list)


@dataclass
class FontState:
    """Current text settings."""

    font: int = 0
    align: Align = Align.LEFT | Align.BASELINE
    pixel_align_text: bool = True
    size: float = 12.0
    color: int = 0xFFFFFFFF
    blur: float = 0.0
    spacing: float = 0.0


@dataclass
class StashParams:
    """Atlas size, coordinate origin, font loader and renderer hooks."""

    width: int
    height: int
    flags: Origin = Origin.ZERO_TOPLEFT
    face_loader: Callable[[bytes, int], FontFace] | None = None
    render_create: Callable[[int, int], bool] | None = None
    render_resize: Callable[[int, int], bool] | None = None
    render_update: Callable[[tuple[int, int, int, int], bytes], None] | None = None
    render_draw: Callable[[list, list, list], None] | None = None
    render_delete: Callable[[], None] | None = None


ErrorCallback = Callable[[ErrorCode, int], None]


class FontStash:
    """Fonts, their glyph cache and the atlas texture the glyphs live in."""

    def __init__(self, params: StashParams) -> None:
        self.params = replace(params)
        if self.params.render_create is not None:
            if not self.params.render_create(self.params.width, self.params.height):
                raise RuntimeError("renderer could not create the font texture")
        self.atlas = Atlas(self.params.width, self.params.height)
        self.fonts: list[Font] = []
        self._tex = bytearray(self.params.width * self.params.height)
        self._dirty = [0, 0, 0, 0]
        self._reset_dirty()
        self._verts: list[tuple[float, float]] = []
        self._tcoords: list[tuple[float, float]] = []
        self._colors: list[int] = []
        self._states: list[FontState] = []
        self._error_callback: ErrorCallback | None = None
        self._closed = False
        self.itw = 1.0
        self.ith = 1.0
        self._update_texel_size()

        # White rect at 0,0 for debug drawing.
        self._add_white_rect(2, 2)

        self.push_state()
        self.clear_state()

    # ----- internal helpers -----

    def _reset_dirty(self) -> None:
        self._dirty = [self.params.width, self.params.height, 0, 0]

    def _mark_dirty(self, x0: int, y0: int, x1: int, y1: int) -> None:
        self._dirty[0] = min(self._dirty[0], x0)
        self._dirty[1] = min(self._dirty[1], y0)
        self._dirty[2] = max(self._dirty[2], x1)
        self._dirty[3] = max(self._dirty[3], y1)

    def _dirty_is_set(self) -> bool:
        return self._dirty[0] < self._dirty[2] and self._dirty[1] < self._dirty[3]

    def _update_texel_size(self) -> None:
        self.itw = 1.0 / self.params.width
        self.ith = 1.0 / self.params.height

    def _report(self, code: ErrorCode, value: int) -> None:
        if self._error_callback is not None:
            self._error_callback(code, value)

    def _add_white_rect(self, w: int, h: int) -> None:
        pos = self.atlas.add_rect(w, h)
        if pos is None:
            return
        gx, gy = pos
        width = self.params.width
        for row in range(h):
            start = gx + (gy + row) * width
            self._tex[start:start + w] = b"\xff" * w
        self._mark_dirty(gx, gy, gx + w, gy + h)

    # ----- configuration -----

    def set_error_callback(self, callback: ErrorCallback | None) -> None:
        """Install a callable receiving (ErrorCode, value) on errors."""
        self._error_callback = callback

    def atlas_size(self) -> tuple[int, int]:
        """Return the current (width, height) of the atlas."""
        return self.params.width, self.params.height

    def expand_atlas(self, width: int, height: int) -> bool:
        """Grow the atlas, keeping its content. Returns False if the renderer refused."""
        width = max(width, self.params.width)
        height = max(height, self.params.height)
        if width == self.params.width and height == self.params.height:
            return True

        self.flush()

        if self.params.render_resize is not None:
            if not self.params.render_resize(width, height):
                return False

        old_w, old_h = self.params.width, self.params.height
        data = bytearray(width * height)
        for row in range(old_h):
            data[row * width:row * width + old_w] = self._tex[row * old_w:(row + 1) * old_w]
        self._tex = data

        self.atlas.expand(width, height)

        maxy = max((node.y for node in self.atlas.nodes), default=0)
        self._dirty = [0, 0, old_w, maxy]

        self.params.width = width
        self.params.height = height
        self._update_texel_size()
        return True

    def reset_atlas(self, width: int, height: int) -> bool:
        """Drop every cached glyph and start over with a new size.

        Returns False if the renderer refused the new size.
        """
        self.flush()

        if self.params.render_resize is not None:
            if not self.params.render_resize(width, height):
                return False

        self.atlas.reset(width, height)
        self._tex = bytearray(width * height)
        self._dirty = [width, height, 0, 0]

        for font in self.fonts:
            font.glyphs.clear()

        self.params.width = width
        self.params.height = height
        self._update_texel_size()

        self._add_white_rect(2, 2)
        return True

    # ----- fonts -----

    def add_font(self, name: str, path: str | Path, font_index: int = 0) -> int:
        """Load a font file and return its index."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise FontLoadError(f"cannot read font file {path}") from exc
        return self.add_font_mem(name, data, font_index)

    def add_font_mem(self, name: str, data: bytes, font_index: int = 0) -> int:
        """Load a font from memory and return its index."""
        loader = self.params.face_loader
        if loader is None:
            raise FontLoadError("no font loader configured")
        data = bytes(data)
        face = loader(data, font_index)

        ascent, descent, line_gap = face.vmetrics()
        ascent += line_gap
        fh = ascent - descent
        if fh == 0:
            raise FontLoadError(f"font {name!r} has zero height")
        ascender = ascent / fh
        descender = descent / fh
        font = Font(
            name=name[:_NAME_LENGTH],
            face=face,
            data=data,
            ascender=ascender,
            descender=descender,
            lineh=ascender - descender,
        )
        self.fonts.append(font)
        return len(self.fonts) - 1

    def font_by_name(self, name: str) -> int:
        """Return the index of the font called *name*; raise KeyError if absent."""
        for index, font in enumerate(self.fonts):
            if font.name == name:
                return index
        raise KeyError(name)

    def add_fallback_font(self, base: int, fallback: int) -> bool:
        """Search *fallback* for glyphs missing in *base*; False once the list is full."""
        base_font = self.fonts[base]
        if len(base_font.fallbacks) >= MAX_FALLBACKS:
            return False
        base_font.fallbacks.append(fallback)
        return True

    def reset_fallback_font(self, base: int) -> None:
        """Remove every fallback of *base* and forget its cached glyphs."""
        base_font = self.fonts[base]
        base_font.fallbacks.clear()
        base_font.glyphs.clear()

    # ----- state -----

    def state(self) -> FontState:
        """Return the state on top of the stack."""
        return self._states[-1]

    def push_state(self) -> None:
        """Push a copy of the current state."""
        if len(self._states) >= MAX_STATES:
            self._report(ErrorCode.STATES_OVERFLOW, 0)
            return
        if self._states:
            self._states.append(replace(self._states[-1]))
        else:
            self._states.append(FontState())

    def pop_state(self) -> None:
        """Return to the previously pushed state."""
        if len(self._states) <= 1:
            self._report(ErrorCode.STATES_UNDERFLOW, 0)
            return
        self._states.pop()

    def clear_state(self) -> None:
        """Reset the current state to the defaults."""
        self._states[-1] = FontState()

    def current_font(self) -> Font | None:
        """Return the font selected by the current state, or None if invalid."""
        index = self.state().font
        if index < 0 or index >= len(self.fonts):
            return None
        return self.fonts[index]

    # ----- glyphs -----

    def get_glyph(
        self,
        font: Font,
        codepoint: int,
        isize: int,
        iblur: int,
        bitmap_option: GlyphBitmap = GlyphBitmap.REQUIRED,
    ) -> Glyph | None:
        """Find or create a glyph of *isize* tenths of a pixel.

        With REQUIRED its bitmap is placed in the atlas; None means it could not be.
        """
        if isize < 2:
            return None
        iblur = min(iblur, MAX_BLUR)
        pad = iblur + 2

        key = (codepoint, isize, iblur)
        glyph = font.glyphs.get(key)
        if glyph is not None and (
            bitmap_option == GlyphBitmap.OPTIONAL or (glyph.x0 >= 0 and glyph.y0 >= 0)
        ):
            return glyph

        size = isize / 10.0
        render_font = font
        g = font.face.glyph_index(codepoint)
        if g == 0:
            for fallback in font.fallbacks:
                fallback_font = self.fonts[fallback]
                fallback_index = fallback_font.face.glyph_index(codepoint)
                if fallback_index != 0:
                    g = fallback_index
                    render_font = fallback_font
                    break
        scale = render_font.face.pixel_height_scale(size)
        box = render_font.face.build_glyph_bitmap(g, size, scale)
        gw = box.x1 - box.x0 + pad * 2
        gh = box.y1 - box.y0 + pad * 2

        if bitmap_option == GlyphBitmap.REQUIRED:
            pos = self.atlas.add_rect(gw, gh)
            if pos is None and self._error_callback is not None:
                # Let the user resize the atlas, then try again.
                self._error_callback(ErrorCode.ATLAS_FULL, 0)
                pos = self.atlas.add_rect(gw, gh)
            if pos is None:
                return None
            gx, gy = pos
        else:
            gx, gy = -1, -1

        if glyph is None:
            glyph = Glyph(codepoint=codepoint, size=isize, blur=iblur)
            font.glyphs[key] = glyph
        glyph.index = g
        glyph.x0 = _short(gx)
        glyph.y0 = _short(gy)
        glyph.x1 = _short(glyph.x0 + gw)
        glyph.y1 = _short(glyph.y0 + gh)
        glyph.xadv = _short(scale * box.advance * 10.0)
        glyph.xoff = _short(box.x0 - pad)
        glyph.yoff = _short(box.y0 - pad)

        if bitmap_option == GlyphBitmap.OPTIONAL:
            return glyph

        width = self.params.width
        render_font.face.render_glyph_bitmap(
            self._tex,
            (glyph.x0 + pad) + (glyph.y0 + pad) * width,
            gw - pad * 2,
            gh - pad * 2,
            width,
            scale,
            scale,
            g,
        )

        # Keep a one pixel empty border.
        base = glyph.x0 + glyph.y0 * width
        for y in range(gh):
            row = base + y * width
            self._tex[row] = 0
            self._tex[row + gw - 1] = 0
        bottom = base + (gh - 1) * width
        self._tex[base:base + gw] = bytes(gw)
        self._tex[bottom:bottom + gw] = bytes(gw)

        if iblur > 0:
            blur(self._tex, base, gw, gh, width, iblur)

        self._mark_dirty(glyph.x0, glyph.y0, glyph.x1, glyph.y1)
        return glyph

    def get_quad(
        self,
        font: Font,
        prev_glyph_index: int,
        glyph: Glyph,
        scale: float,
        spacing: float,
        x: float,
        y: float,
    ) -> tuple[Quad, float]:
        """Place *glyph* at pen position (x, y); return its quad and the advanced x."""
        pixel_align = self.state().pixel_align_text

        if prev_glyph_index != -1:
            adv = font.face.kern_advance(prev_glyph_index, glyph.index) * scale
            x += adv + spacing

        # Inset the texture region by one pixel for correct interpolation.
        xoff = _short(glyph.xoff + 1)
        yoff = _short(glyph.yoff + 1)
        x0 = float(glyph.x0 + 1)
        y0 = float(glyph.y0 + 1)
        x1 = float(glyph.x1 - 1)
        y1 = float(glyph.y1 - 1)

        if self.params.flags & Origin.ZERO_TOPLEFT:
            if pixel_align:
                rx = float(int(x + 0.5 + xoff))
                ry = float(int(y + 0.5 + yoff))
            else:
                rx = x + xoff
                ry = y + yoff
            qy1 = ry + y1 - y0
        else:
            if pixel_align:
                rx = float(int(x + 0.5 + xoff))
                ry = float(int(y + 0.5 - yoff))
            else:
                rx = x + xoff
                ry = y - yoff
            qy1 = ry - y1 + y0

        quad = Quad(
            x0=rx,
            y0=ry,
            s0=x0 * self.itw,
            t0=y0 * self.ith,
            x1=rx + x1 - x0,
            y1=qy1,
            s1=x1 * self.itw,
            t1=y1 * self.ith,
        )

        if pixel_align:
            x += int(glyph.xadv / 10.0 + 0.5)
        else:
            x += glyph.xadv / 10.0
        return quad, x

    def vert_align(self, font: Font, align: Align, isize: int) -> float:
        """Return the y offset that applies the vertical part of *align*."""
        size = isize / 10.0
        if self.params.flags & Origin.ZERO_TOPLEFT:
            sign = 1.0
        else:
            sign = -1.0
        if align & Align.TOP:
            return sign * font.ascender * size
        if align & Align.MIDDLE:
            return sign * (font.ascender + font.descender) / 2.0 * size
        if align & Align.BASELINE:
            return 0.0
        if align & Align.BOTTOM:
            return sign * font.descender * size
        return 0.0

    # ----- output -----

    @property
    def vertex_count(self) -> int:
        """Number of vertices waiting to be drawn."""
        return len(self._verts)

    def add_vertex(self, x: float, y: float, s: float, t: float, color: int) -> None:
        """Queue one vertex, flushing first if the buffer is full."""
        if len(self._verts) >= VERTEX_COUNT:
            self.flush()
        self._verts.append((x, y))
        self._tcoords.append((s, t))
        self._colors.append(color)

    def flush(self) -> None:
        """Send the dirty texture region and queued vertices to the renderer."""
        if self._dirty_is_set():
            if self.params.render_update is not None:
                self.params.render_update(tuple(self._dirty), bytes(self._tex))
            self._reset_dirty()

        if self._verts:
            if self.params.render_draw is not None:
                self.params.render_draw(list(self._verts), list(self._tcoords), list(self._colors))
            self._verts.clear()
            self._tcoords.clear()
            self._colors.clear()

    def texture_data(self) -> tuple[bytes, int, int]:
        """Return a copy of the atlas texture with its width and height."""
        return bytes(self._tex), self.params.width, self.params.height

    def validate_texture(self) -> tuple[int, int, int, int] | None:
        """Return and clear the dirty rectangle (x0, y0, x1, y1), or None if clean."""
        if not self._dirty_is_set():
            return None
        rect = (self._dirty[0], self._dirty[1], self._dirty[2], self._dirty[3])
        self._reset_dirty()
        return rect

    def close(self) -> None:
        """Release the renderer texture and the fonts."""
        if self._closed:
            return
        self._closed = True
        if self.params.render_delete is not None:
            self.params.render_delete()
        self.fonts.clear()

    def __enter__(self) -> FontStash:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()