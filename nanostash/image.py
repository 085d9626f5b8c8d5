"""Image descriptions identified by a cache key built from their source and flags."""

from __future__ import annotations

import enum


class ImageFlag(enum.IntFlag):
    """Properties of a loaded image."""

    GENERATE_MIPMAPS = 1 << 0
    REPEATX = 1 << 1
    REPEATY = 1 << 2
    FLIPY = 1 << 3
    PREMULTIPLIED = 1 << 4
    NEAREST = 1 << 5


_NO_FLAGS = ImageFlag(0)


class Image:
    """An image loaded from a file or taken from a framebuffer texture.

    Images with equal ``unique_key`` share one cache entry.
    """

    def __init__(self, filename: str | None = None, flags: ImageFlag = _NO_FLAGS) -> None:
        self._filename = filename or ""
        self._flags = ImageFlag(flags)
        self._texture_id = 0
        self._size: tuple[int, int] | None = None
        self._unique_key = ""
        if filename is not None:
            self._update_unique_key()

    def _update_unique_key(self) -> None:
        if self._texture_id > 0:
            key = f"{self._texture_id}_"
        else:
            key = self._filename
        self._unique_key = key + str(int(self._flags))

    @property
    def filename(self) -> str:
        """The file the image is loaded from; empty for framebuffer images."""
        return self._filename

    @filename.setter
    def filename(self, filename: str) -> None:
        if self._filename == filename:
            return
        self._filename = filename
        self._texture_id = 0
        self._update_unique_key()

    @property
    def flags(self) -> ImageFlag:
        """Flags the image is created with."""
        return self._flags

    @flags.setter
    def flags(self, flags: ImageFlag) -> None:
        flags = ImageFlag(flags)
        if self._flags == flags:
            return
        self._flags = flags
        self._update_unique_key()

    @property
    def texture_id(self) -> int:
        """Texture handle of a framebuffer image, 0 otherwise."""
        return self._texture_id

    def set_frame_buffer(self, width: int, height: int, texture_id: int) -> None:
        """Take the image from a framebuffer texture; adds FLIPY for correct orientation."""
        self._size = (width, height)
        self._texture_id = texture_id
        self._flags |= ImageFlag.FLIPY
        self._filename = ""
        self._update_unique_key()

    @staticmethod
    def from_frame_buffer(
        width: int, height: int, texture_id: int, flags: ImageFlag = ImageFlag.FLIPY
    ) -> Image:
        """Return an image of a framebuffer texture of the given size."""
        image = Image()
        image._size = (width, height)
        image._texture_id = texture_id
        image._flags = ImageFlag(flags)
        image._update_unique_key()
        return image

    @property
    def width(self) -> int:
        """Width in pixels, 0 while unknown."""
        return self._size[0] if self._size is not None else 0

    @property
    def height(self) -> int:
        """Height in pixels, 0 while unknown."""
        return self._size[1] if self._size is not None else 0

    @property
    def unique_key(self) -> str:
        """Cache key derived from the texture or filename and the flags."""
        return self._unique_key