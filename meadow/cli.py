from __future__ import annotations

import argparse
import logging
import random

from meadow.app import load_density, run_walk
from meadow.config import (
    APP_VERSION,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DENSITY_RES,
    DEFAULT_INSTANCE_COUNT,
    DEFAULT_LEVEL_DEPTH,
    DEFAULT_LEVEL_WIDTH,
    DEFAULT_SEED,
    DEFAULT_STEPS,
    DEFAULT_WALK_SPEED,
    GrassSettings,
)
from meadow.util.log import setup_logging
from meadow.world.level import StaticLevel

EXIT_DISABLED = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="meadow", description=f"Chunked grass scatter over a bounded level v{APP_VERSION}")
    p.add_argument("--seed", default=str(DEFAULT_SEED), help="int seed or 'random' (default: 12345)")
    p.add_argument("--width", type=float, default=DEFAULT_LEVEL_WIDTH, help="level size along X (world units)")
    p.add_argument("--depth", type=float, default=DEFAULT_LEVEL_DEPTH, help="level size along Z (world units)")
    p.add_argument("--offset-x", type=float, default=0.0, help="horizontal X position of the level object")
    p.add_argument("--offset-y", type=float, default=0.0, help="horizontal Z position of the level object")
    p.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="chunk edge length (default: 50)")
    p.add_argument("--instances", type=int, default=DEFAULT_INSTANCE_COUNT, help="grass instances per chunk (default: 100)")
    p.add_argument("--density-image", default=None, help="image whose red channel is the density field (default: value noise)")
    p.add_argument("--density-res", type=int, default=DEFAULT_DENSITY_RES, help="resolution of the noise density field")
    p.add_argument("--speed", type=float, default=DEFAULT_WALK_SPEED, help="reference point speed along +Z (units / step)")
    p.add_argument("--steps", type=int, default=DEFAULT_STEPS, help="number of update passes")
    p.add_argument("--out", default=None, help="write activated placements to this .npz file")
    p.add_argument("--preview", default=None, help="render an offscreen preview to this .png (needs OpenGL 3.3)")
    p.add_argument("--debug", action="store_true", help="debug logging")
    p.add_argument("--log-file", default=None, help="also write logs to this file")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)

    if isinstance(args.seed, str) and args.seed.lower() == "random":
        seed = random.randint(0, 2**31 - 1)
    else:
        seed = int(args.seed)

    level = StaticLevel(width=float(args.width), depth=float(args.depth), offset=(float(args.offset_x), float(args.offset_y)))
    density = load_density(image=args.density_image, seed=seed, res=int(args.density_res))

    field = run_walk(
        seed=seed,
        level=level,
        density=density,
        settings=GrassSettings(chunk_size=int(args.chunk_size), instance_count=int(args.instances)),
        speed=float(args.speed),
        steps=int(args.steps),
        out=args.out,
        preview=args.preview,
    )
    return 0 if field is not None else EXIT_DISABLED


if __name__ == "__main__":
    raise SystemExit(main())
