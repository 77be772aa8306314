"""
Element screenshot cropping
"""

import io

from PIL import Image

from .protocol import Dimension, Point


def crop_to_element(screenshot_png: bytes, location: Point, size: Dimension, scale: float = 1.0) -> bytes:
    """Crop a viewport screenshot down to one element's box.

    `location` and `size` are in CSS pixels; `scale` is the device pixel
    ratio of the screenshot. The result always measures exactly the scaled
    element size. Parts of the box outside the screenshot come out black; a box
    entirely outside it is an error rather than an all-black image.
    """
    if size.width <= 0 or size.height <= 0:
        raise ValueError(f"Element has no rendered area: {size}")

    left = round(location.x * scale)
    top = round(location.y * scale)
    width = round(size.width * scale)
    height = round(size.height * scale)

    with Image.open(io.BytesIO(screenshot_png)) as full:
        if left >= full.width or top >= full.height or left + width <= 0 or top + height <= 0:
            raise ValueError(
                f"Element box at {location} {size} lies outside the {full.width}x{full.height} screenshot"
            )
        cropped = full.crop((left, top, left + width, top + height))
        buffer = io.BytesIO()
        cropped.save(buffer, format="PNG")
    return buffer.getvalue()
