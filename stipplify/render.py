"""Draw a site snapshot as dots on a flat background."""

from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw


def render_stipples(
    positions: np.ndarray,
    size: Tuple[int, int],
    radius: float = 1.5,
    background: Tuple[int, int, int] = (30, 30, 30),
    color: Tuple[int, int, int] = (255, 255, 255),
    scale: float = 1.0,
) -> Image.Image:
    """Render one filled circle per position.

    ``size`` is the field's (width, height); ``scale`` enlarges the canvas and
    the positions together for higher-resolution output.
    """
    W, H = size
    out = Image.new("RGB", (max(1, int(round(W * scale))), max(1, int(round(H * scale)))), background)
    draw = ImageDraw.Draw(out)
    r = radius * scale
    for x, y in (np.asarray(positions, dtype=np.float64).reshape(-1, 2) * scale).tolist():
        draw.ellipse((x - r, y - r, x + r, y + r), fill=color)
    return out
