from __future__ import annotations

import argparse
import logging
import subprocess
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from mandelstripe.config import load_config, normalise_config
from mandelstripe.pipeline import render_info, render_to_file
from mandelstripe.util.logging_setup import configure_root_logging, get_logger, shutdown_logging
from mandelstripe.util.manifest import build_manifest, write_manifest

T = TypeVar("T")

def parse_pair(s: str, delimiter: str, convert: Callable[[str], T]) -> Optional[Tuple[T, T]]:
    """Parse ``"<a><delimiter><b>"``, e.g. ``"1000x750"`` or ``"-1.2,0.35"``.

    Returns ``None`` when the delimiter is missing or either half fails to
    convert. Surrounding whitespace and ``_`` digit separators are rejected
    even though ``int``/``float`` would accept them.
    """
    index = s.find(delimiter)
    if index < 0:
        return None
    left, right = s[:index], s[index + 1:]
    for half in (left, right):
        if half != half.strip() or "_" in half:
            return None
    try:
        return convert(left), convert(right)
    except ValueError:
        return None

def parse_complex(s: str) -> Optional[complex]:
    pair = parse_pair(s, ",", float)
    if pair is None:
        return None
    return complex(pair[0], pair[1])

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelstripe", description="Multi-threaded grayscale Mandelbrot renderer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG","INFO","WARNING","ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser(
        "render",
        help="Render a viewport of the Mandelbrot set to a PNG file.",
        epilog="Example: mandelstripe render mandelbrot.png 1000x750 -1.20,0.35 -1,0.20",
    )
    r.add_argument("filename", nargs="?", default=None, help="Output PNG (defaults to config.output).")
    r.add_argument("dimensions", nargs="?", default=None, help="Image size as WIDTHxHEIGHT, e.g. 1000x750.")
    r.add_argument("upper_left", nargs="?", default=None, help="Upper-left corner as RE,IM, e.g. -1.20,0.35.")
    r.add_argument("lower_right", nargs="?", default=None, help="Lower-right corner as RE,IM, e.g. -1,0.20.")
    r.add_argument("--threads", type=int, default=None, help="Worker threads (defaults to config.threads or the logical core count).")
    r.add_argument("--limit", type=int, default=None, help="Iteration limit (defaults to config.limit, 255).")
    r.add_argument("--progress", action="store_true", help="Show a progress bar over finished stripes.")
    r.add_argument("--manifest", type=str, default="artifacts/run.json", help="Run manifest path. Set empty to skip.")

    return p

def _apply_render_args(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    out = dict(cfg)
    if args.filename:
        out["output"] = args.filename
    if args.dimensions is not None:
        dims = parse_pair(args.dimensions, "x", int)
        if dims is None:
            raise ValueError(f"failed to parse DIMENSIONS: {args.dimensions!r}")
        out["width"], out["height"] = dims
    for name in ("upper_left", "lower_right"):
        raw = getattr(args, name)
        if raw is None:
            continue
        point = parse_complex(raw)
        if point is None:
            raise ValueError(f"failed to parse {name.upper()}: {raw!r}")
        out[name] = point
    if args.threads is not None:
        out["threads"] = args.threads
    if args.limit is not None:
        out["limit"] = args.limit
    return out

def main(argv: Optional[list] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    configure_root_logging(level=log_level, console=True, log_file=log_file)
    logger = get_logger()

    try:
        cfg = load_config(args.config)

        if args.cmd == "render":
            try:
                cfg = normalise_config(_apply_render_args(cfg, args))
            except ValueError as e:
                parser.error(str(e))

            result = render_to_file(cfg=cfg, progress=args.progress)

            if args.manifest:
                info = dict(render_info(cfg), elapsed_seconds=result["elapsed_seconds"])
                manifest = build_manifest(config=cfg, render_info=info, git_commit=_git_commit())
                write_manifest(args.manifest, manifest)
                logger.info("Run manifest written: %s", args.manifest)
            return 0

        raise RuntimeError("Unknown command.")
    except Exception:
        logger.exception("Run failed")
        raise
    finally:
        shutdown_logging()
