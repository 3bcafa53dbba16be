import json
from typing import Any, Dict, Optional

from mandelstripe.geometry import Viewport
from mandelstripe.renderers.cpu_threads import DEFAULT_LIMIT, default_threads

DEFAULTS: Dict[str, Any] = {
    "width": 1000,
    "height": 750,
    "upper_left": [-1.20, 0.35],
    "lower_right": [-1.0, 0.20],
    "threads": None,
    "limit": DEFAULT_LIMIT,
    "output": "mandelbrot.png",
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if config_path:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            raise ValueError("Config JSON must be an object.")
        out = dict(DEFAULTS)
        out.update(cfg)
        return out
    return dict(DEFAULTS)

def _int_field(cfg: Dict[str, Any], name: str, default: Any = None) -> int:
    value = cfg.get(name, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}.") from e

def _complex_field(cfg: Dict[str, Any], name: str) -> complex:
    value = cfg[name]
    if isinstance(value, complex):
        return value
    if not (isinstance(value, (list, tuple)) and len(value) == 2):
        raise ValueError(f"{name} must be [re, im].")
    try:
        return complex(float(value[0]), float(value[1]))
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be [re, im] numbers, got {value!r}.") from e

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    required = ["width", "height", "upper_left", "lower_right"]
    for r in required:
        if r not in cfg:
            raise ValueError(f"Missing config field: {r}")

    width = _int_field(cfg, "width")
    height = _int_field(cfg, "height")
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")

    upper_left = _complex_field(cfg, "upper_left")
    lower_right = _complex_field(cfg, "lower_right")
    Viewport(upper_left, lower_right).validate()

    threads = cfg.get("threads")
    threads = default_threads() if threads is None else _int_field(cfg, "threads")
    if threads < 1:
        raise ValueError("threads must be >= 1.")

    limit = _int_field(cfg, "limit", DEFAULT_LIMIT)
    if limit < 0:
        raise ValueError("limit must be >= 0.")

    out = dict(cfg)
    out["width"] = width
    out["height"] = height
    out["upper_left"] = upper_left
    out["lower_right"] = lower_right
    out["threads"] = threads
    out["limit"] = limit
    out["output"] = str(cfg.get("output", DEFAULTS["output"]))
    return out
