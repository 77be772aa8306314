import io

import pytest
from PIL import Image

from ui_actions.protocol import Dimension, Point
from ui_actions.screenshots import crop_to_element


def _png(width, height, colour="white", box=None, fill=(255, 0, 0)):
    image = Image.new("RGB", (width, height), colour)
    if box:
        image.paste(fill, box)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _open(png):
    return Image.open(io.BytesIO(png)).convert("RGB")


def test_crop_matches_element_box():
    screenshot = _png(800, 600, box=(100, 50, 300, 90))

    cropped = _open(crop_to_element(screenshot, Point(100, 50), Dimension(200, 40)))

    assert cropped.size == (200, 40)
    assert cropped.getpixel((0, 0)) == (255, 0, 0)
    assert cropped.getpixel((199, 39)) == (255, 0, 0)


def test_crop_scales_by_device_pixel_ratio():
    screenshot = _png(1600, 1200, box=(200, 100, 600, 180))

    cropped = _open(crop_to_element(screenshot, Point(100, 50), Dimension(200, 40), scale=2))

    assert cropped.size == (400, 80)
    assert cropped.getpixel((399, 79)) == (255, 0, 0)


def test_crop_outside_screenshot_is_padded():
    screenshot = _png(100, 100)

    cropped = _open(crop_to_element(screenshot, Point(80, 80), Dimension(40, 40)))

    assert cropped.size == (40, 40)
    assert cropped.getpixel((5, 5)) == (255, 255, 255)
    assert cropped.getpixel((35, 35)) == (0, 0, 0)


@pytest.mark.parametrize("size", [Dimension(0, 10), Dimension(10, 0)])
def test_element_without_area_is_rejected(size):
    with pytest.raises(ValueError):
        crop_to_element(_png(10, 10), Point(0, 0), size)


@pytest.mark.parametrize("location", [Point(0, 150), Point(150, 0), Point(-60, 10), Point(10, -60)])
def test_box_entirely_outside_screenshot_is_rejected(location):
    with pytest.raises(ValueError, match="outside"):
        crop_to_element(_png(100, 100), location, Dimension(50, 50))
