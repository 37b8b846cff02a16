"""Pixel buffer and PNG helpers shared by the tests."""

from pathlib import Path

import numpy as np
from PIL import Image

from welder.errors import ExternalToolError


def solid_pixels(width: int, height: int, color=(255, 0, 0, 255)) -> np.ndarray:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


def gradient_pixels(width: int, height: int) -> np.ndarray:
    """Every pixel distinct, so nearest-neighbor mistakes are visible."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            pixels[y, x] = ((x * 37) % 256, (y * 53) % 256, (x + y) % 256, 255)
    return pixels


def write_png(path: Path, pixels: np.ndarray) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(pixels).save(path, format="PNG")
    return path


def read_png(path: Path) -> np.ndarray:
    with Image.open(path) as img:
        return np.asarray(img.convert("RGBA"))


class FakePublisher:
    """Records pushes instead of launching a process."""

    name = "fake"

    def __init__(self, fail_check: bool = False):
        self.fail_check = fail_check
        self.pushed = []

    def check(self) -> str:
        if self.fail_check:
            raise ExternalToolError("fake publisher missing")
        return "1.0"

    def command(self, archive, target, channel):
        return ["fake", "push", str(archive), f"{target}:{channel}"]

    def push(self, archive, target, channel):
        self.pushed.append((archive, target, channel, archive.read_bytes()))


MINIMAL_CONFIG = """
[pack]
name = "Test Pack"
slug = "test-pack"
author = "Tester"
semver = "1.2.3"

[build]
resolutions = [1, 2]

[sheet]
max_width = 64
max_height = 64
padding_px = 2

[grid]
cell_px = 16
padding_px = 4
columns = 3

[publish]
target = "tester/test-pack"
"""
