"""Image -> Field conversion (dark pixels attract stipples)."""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .field import Field


def image_to_field(im: Image.Image, max_dim: int = 800, invert: bool = True) -> Field:
    """Downscale ``im`` to fit ``max_dim`` and map brightness to weight.

    Brightness is the plain mean of R, G and B over 255; with ``invert`` the
    weight is ``1 - brightness`` so darker areas get more stipples.
    """
    im = im.convert("RGB")
    W, H = im.size
    if max_dim and (W > max_dim or H > max_dim):
        scale = max_dim / max(W, H)
        W = max(1, int(W * scale))
        H = max(1, int(H * scale))
        im = im.resize((W, H), Image.BILINEAR)

    img_np = np.asarray(im, dtype=np.float64)
    brightness = img_np.mean(axis=2) / 255.0
    weights = 1.0 - brightness if invert else brightness
    return Field(np.clip(weights, 0.0, 1.0))


def load_field(image_path: Union[str, Path], max_dim: int = 800, invert: bool = True) -> Field:
    with Image.open(image_path) as im:
        return image_to_field(im, max_dim=max_dim, invert=invert)
