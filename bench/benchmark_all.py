#!/usr/bin/env python3
"""Time every registered site index on the same relaxation and record CSV.

Runs, for each implementation in `stipplify.site_index.SITE_INDEXES`:
- sampling from a synthetic gradient image (same seed for all)
- `--iterations` Lloyd steps

Writes `bench/bench_out/results.csv` with columns:
implementation,size,points,iterations,time_s,s_per_iter,output
"""

import argparse
import csv
import time
from pathlib import Path

import numpy as np
from PIL import Image

from stipplify import RelaxationDriver, StippleConfig
from stipplify.image_field import image_to_field
from stipplify.render import render_stipples
from stipplify.site_index import SITE_INDEXES


def make_test_image(size=(512, 512)) -> Image.Image:
    W, H = size
    xs = np.arange(W)[None, :] * 255 // max(1, W - 1)
    ys = np.arange(H)[:, None] * 255 // max(1, H - 1)
    arr = np.zeros((H, W, 3), dtype=np.uint8)
    arr[..., 0] = xs
    arr[..., 1] = ys
    arr[..., 2] = (xs + ys) // 2
    return Image.fromarray(arr)


def run_index(name, field, points, iterations, seed):
    driver = RelaxationDriver(StippleConfig(site_index=name))
    driver.start(field, points, seed=seed)
    t0 = time.perf_counter()
    positions = driver.context.sites
    for _ in range(iterations):
        positions = driver.step().positions
    elapsed = time.perf_counter() - t0
    driver.stop()
    return elapsed, positions


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--size", type=int, default=256)
    p.add_argument("--points", type=int, default=1024)
    p.add_argument("--iterations", type=int, default=5)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--outdir", default="bench/bench_out")
    args = p.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    img = make_test_image(size=(args.size, args.size))
    img.save(outdir / "bench_in.png")
    field = image_to_field(img, max_dim=args.size)

    results_csv = outdir / "results.csv"
    with open(results_csv, "w", newline="") as csvf:
        writer = csv.writer(csvf)
        writer.writerow(["implementation", "size", "points", "iterations", "time_s", "s_per_iter", "output"])

        for name in sorted(SITE_INDEXES):
            out = outdir / f"{name}_out.png"
            try:
                t, positions = run_index(name, field, args.points, args.iterations, args.seed)
            except Exception as e:
                print(f"{name} failed:", e)
                continue
            render_stipples(positions, (field.width, field.height)).save(out)
            writer.writerow(
                [
                    name,
                    f"{args.size}x{args.size}",
                    args.points,
                    args.iterations,
                    f"{t:.6f}",
                    f"{t / max(1, args.iterations):.6f}",
                    str(out),
                ]
            )
            print(f"{name}: {t:.3f}s")

    print(f"Results written to {results_csv}")


if __name__ == "__main__":
    main()
