#!/usr/bin/env python3
"""Weighted Voronoi stippling of an image from the command line.

Loads an image, turns darkness into a density field, runs a fixed number of
Lloyd relaxation iterations (or until the motion threshold is met) and saves
the stipples as a PNG.

Usage: python -m stipplify.cli photo.jpg --points 4000 --iterations 60
"""

import argparse
import itertools
import logging
import math
import sys

from .config import StippleConfig
from .driver import RelaxationDriver
from .errors import StippleError
from .image_field import load_field
from .render import render_stipples
from .site_index import SITE_INDEXES

log = logging.getLogger("stipplify")


def setup_logging(verbosity: int = 0) -> None:
    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(verbosity, 2)]
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def stipple_image(
    image_path: str,
    out_path: str = "stipples.png",
    n_points: int = 2000,
    iterations: int = 50,
    threshold=None,
    max_dim: int = 800,
    radius: float = 1.5,
    scale: float = 1.0,
    site_index: str = "delaunay",
    seed=None,
):
    field = load_field(image_path, max_dim=max_dim)
    config = StippleConfig(convergence_threshold=threshold, site_index=site_index)
    driver = RelaxationDriver(config)
    driver.start(field, n_points, seed=seed)

    positions = driver.context.sites.copy()
    for result in itertools.islice(driver.iterations(), iterations):
        positions = result.positions
        log.info("iteration %d: max motion %.2f", result.iteration, math.sqrt(result.convergence_metric))
    driver.stop()

    render_stipples(positions, (field.width, field.height), radius=radius, scale=scale).save(out_path)
    return out_path


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Weighted Voronoi stippling")
    p.add_argument("image", help="input image path")
    p.add_argument("--out", default="stipples.png")
    p.add_argument("--points", type=int, default=2000)
    p.add_argument("--iterations", type=int, default=50)
    p.add_argument("--threshold", type=float, default=None, help="stop once max squared motion drops below this")
    p.add_argument("--max-dim", type=int, default=800)
    p.add_argument("--radius", type=float, default=1.5)
    p.add_argument("--scale", type=float, default=1.0)
    p.add_argument(
        "--index",
        choices=sorted(SITE_INDEXES),
        default="delaunay",
        help="nearest-site lookup; kdtree ignores the previous answer and queries cold",
    )
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    setup_logging(args.verbose)
    try:
        out = stipple_image(
            image_path=args.image,
            out_path=args.out,
            n_points=args.points,
            iterations=args.iterations,
            threshold=args.threshold,
            max_dim=args.max_dim,
            radius=args.radius,
            scale=args.scale,
            site_index=args.index,
            seed=args.seed,
        )
    except (OSError, StippleError, ValueError) as e:
        log.error("%s", e)
        return 1
    print("saved:", out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
