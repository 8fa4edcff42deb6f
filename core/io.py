from __future__ import annotations

from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from core.surface import PixelSurface


class DecodeError(ValueError):
    pass


def decode_image_rgba(stream: BinaryIO) -> PixelSurface:
    try:
        img = Image.open(stream)
        img.load()
        # Convert to RGBA for consistent alpha work
        return PixelSurface.from_pil(img.convert("RGBA"))
    except DecodeError:
        raise
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise DecodeError(str(e)) from e


def save_surface_png(path: str, surface: PixelSurface) -> None:
    # Saving as PNG preserves alpha
    surface.to_pil().save(path, format="PNG")
