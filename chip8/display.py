"""Monochrome framebuffer for the CHIP-8 virtual machine."""

VIDEO_WIDTH = 64
VIDEO_HEIGHT = 32
VIDEO_SIZE = VIDEO_WIDTH * VIDEO_HEIGHT

PIXEL_ON = 0xFF
PIXEL_OFF = 0x00


class Framebuffer:
    """64x32 byte pixels, row-major, each either 0x00 or 0xFF."""

    def __init__(self, width: int = VIDEO_WIDTH, height: int = VIDEO_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = bytearray(width * height)

    def clear(self) -> None:
        self._pixels[:] = bytes(len(self._pixels))

    def pixel(self, x: int, y: int) -> int:
        """Return pixel at (x, y), wrapping both coordinates."""
        return self._pixels[(y % self.height) * self.width + (x % self.width)]

    def get_pixel_at(self, row: int, col: int) -> int:
        """Return the byte at (row + col*width) mod size.

        `row` walks along a scanline and `col` selects the scanline, so a
        renderer iterating row over the width and col over the height sees
        the screen the right way up.
        """
        return self._pixels[(row + col * self.width) % len(self._pixels)]

    def draw_sprite(self, x: int, y: int, sprite: bytes) -> bool:
        """XOR an 8-pixel-wide sprite onto the screen at (x, y).

        Each sprite byte is one row, most significant bit leftmost. Pixels
        past the right or bottom edge wrap to the opposite side.

        Returns:
            True if any lit pixel was turned off
        """
        x0 = x % self.width
        y0 = y % self.height
        collision = False
        for row, bits in enumerate(sprite):
            offset = ((y0 + row) % self.height) * self.width
            for col in range(8):
                if bits & (0x80 >> col) == 0:
                    continue
                pos = offset + (x0 + col) % self.width
                if self._pixels[pos] == PIXEL_ON:
                    collision = True
                self._pixels[pos] ^= PIXEL_ON
        return collision

    def rows(self) -> list[list[int]]:
        """Return the screen as `height` lists of `width` pixel bytes."""
        return [[self.pixel(x, y) for x in range(self.width)] for y in range(self.height)]

    def to_text(self, on: str = "#", off: str = ".") -> str:
        """Render the screen as text, one line per scanline."""
        return "\n".join(
            "".join(on if p else off for p in row) for row in self.rows()
        )

    def snapshot(self) -> bytes:
        return bytes(self._pixels)
