# nanostash

`nanostash` keeps a font glyph cache for vector drawing. It packs glyph
bitmaps into one 8-bit alpha texture with a skyline packer, lays out and
measures UTF-8 text, and batches textured quads for a renderer to draw. It
also gives images a stable cache key built from their file name or
frame-buffer texture and their flags.

## Modules

- `nanostash.atlas`: the skyline packer. `Atlas(width, height)` holds a list
  of `AtlasNode` segments; `Atlas.add_rect(w, h)` returns the `(x, y)` of a
  free spot or `None` when nothing fits; `Atlas.expand` grows the area and
  `Atlas.reset` empties it with a new size.
- `nanostash.utf8`: an incremental UTF-8 decoder. `decode_step(state,
  codepoint, byte)` returns the new `(state, codepoint)`; a codepoint is
  complete when the state is `UTF8_ACCEPT`. `iter_codepoints(data)` yields
  every complete codepoint of a byte sequence. `hash_int` mixes the bits of a
  32-bit integer.
- `nanostash.blur`: `blur(data, offset, width, height, stride, radius)`
  blurs a block of a `bytearray` texture in place and zeroes its border; a
  radius below 1 does nothing.
- `nanostash.stash`: `FontStash`, built from `StashParams`. It holds the
  fonts, a stack of `FontState` values (font, size, colour, blur, spacing,
  `Align` flags, pixel alignment), the glyph cache, the texture and the
  vertex batch.
- `nanostash.text`: `draw_text`, `text_bounds`, `vert_metrics`,
  `line_bounds`, `draw_debug`, and `TextIterator`, which yields one `Quad`
  (or `None`) per codepoint.
- `nanostash.image`: `Image` and `ImageFlag`.

## Fonts

The stash does not read font files by itself. Glyph shapes come from a
`FontFace` subclass that you provide, which reports vertical metrics, glyph
indices, glyph boxes (`GlyphBox`), kerning, and writes glyph coverage into the
texture. `StashParams.face_loader` is called with `(data, font_index)` and
must return such a face; without a loader `add_font_mem` raises
`FontLoadError`, as does `add_font` when the file cannot be read.

```python
from nanostash.stash import FontStash, StashParams, Origin, Align
from nanostash.text import draw_text, text_bounds

params = StashParams(
    width=512,
    height=512,
    flags=Origin.ZERO_TOPLEFT,
    face_loader=load_face,            # your callable returning a FontFace
    render_update=upload_texture,     # given (dirty_rect, texture_bytes)
    render_draw=draw_triangles,       # given (vertices, tex_coords, colours)
)

with FontStash(params) as stash:
    sans = stash.add_font("sans", "fonts/sans.ttf")
    stash.state().font = sans
    stash.state().size = 18.0
    stash.state().align = Align.LEFT | Align.TOP

    end_x = draw_text(stash, 10.0, 40.0, "Hello")
    advance, bounds = text_bounds(stash, 10.0, 40.0, "Hello")
```

`font_by_name` returns a font's index or raises `KeyError`.
`add_fallback_font(base, fallback)` makes the stash look in another font for
glyphs the base font lacks (at most 20 fallbacks).

`text_bounds` returns the advance and `(minx, miny, maxx, maxy)`;
`vert_metrics` returns `(ascender, descender, line_height)` and `line_bounds`
returns `(miny, maxy)`. Without a valid font these give `(0.0, None)`,
`None` and `None`, and `draw_text` returns `x` unchanged. `TextIterator`
raises `ValueError` when no valid font is selected.

## State, errors and the atlas

`push_state`, `pop_state` and `clear_state` manage the state stack (up to 20
entries). Overflow, underflow and a full atlas are reported as an
`ErrorCode` to the callable set with `FontStash.set_error_callback`. On
`ATLAS_FULL` the callback may call `expand_atlas` (which keeps the texture
content) or `reset_atlas` (which drops every cached glyph); the stash then
tries to place the glyph once more.

`validate_texture()` returns and clears the dirty rectangle, or `None`;
`texture_data()` returns a copy of the texture with its width and height;
`flush()` hands both the dirty texture and the queued vertices to the
renderer callbacks.

## Images

```python
from nanostash.image import Image, ImageFlag

icon = Image("icons/home.png", ImageFlag.GENERATE_MIPMAPS)
icon.unique_key            # "icons/home.png1"

target = Image.from_frame_buffer(256, 128, 7, ImageFlag.FLIPY)
target.width, target.height   # (256, 128)
target.unique_key             # "7_8"
```

`filename` and `flags` are settable properties; changing either updates the
key. `set_frame_buffer(width, height, texture_id)` switches an image to a
texture, clears its file name and adds `FLIPY`.

## What it does not do

There is no font file parser or rasteriser and no GPU renderer: both are
supplied through `FontFace` and the `StashParams` callbacks. `Image` only
describes an image and its cache key; it does not load or decode pixel data,
and an image given by file name reports a width and height of 0.

## Tests

```
pip install -e .[test]
pytest
```