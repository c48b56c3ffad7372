"""Environment-driven application settings.

`main.py` calls `load_dotenv()` before `AppSettings.from_env()`, so values
may come from the process environment or a local `.env` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not an integer") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a number") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise RuntimeError(f"{name}={raw!r} is not a boolean")


@dataclass(frozen=True)
class AppSettings:
    """Runtime configuration for the cart service and fitting workspaces."""

    session_ttl_seconds: int = 30 * 60
    reaper_interval_seconds: int = 60
    enforce_product_options: bool = False
    canvas_width: int = 480
    canvas_height: int = 640
    canvas_device_pixel_ratio: float = 1.0
    canvas_fill_color: str = "#111"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_image_pixels: int = 40_000_000
    log_level: str = "INFO"
    public_dir: Path = Path(__file__).resolve().parent.parent / "public"

    @classmethod
    def from_env(cls) -> "AppSettings":
        defaults = cls()
        public_dir = os.getenv("PUBLIC_DIR")
        return cls(
            session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", defaults.session_ttl_seconds),
            reaper_interval_seconds=_env_int("REAPER_INTERVAL_SECONDS", defaults.reaper_interval_seconds),
            enforce_product_options=_env_bool("ENFORCE_PRODUCT_OPTIONS", defaults.enforce_product_options),
            canvas_width=_env_int("CANVAS_WIDTH", defaults.canvas_width),
            canvas_height=_env_int("CANVAS_HEIGHT", defaults.canvas_height),
            canvas_device_pixel_ratio=_env_float("CANVAS_DEVICE_PIXEL_RATIO", defaults.canvas_device_pixel_ratio),
            canvas_fill_color=os.getenv("CANVAS_FILL_COLOR") or defaults.canvas_fill_color,
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
            max_image_pixels=_env_int("MAX_IMAGE_PIXELS", defaults.max_image_pixels),
            log_level=(os.getenv("LOG_LEVEL") or defaults.log_level).upper(),
            public_dir=Path(public_dir).expanduser() if public_dir else defaults.public_dir,
        )
