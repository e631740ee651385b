import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SELECTION_MODES = ("interactive", "fixed")
CLONE_BACKENDS = ("opencv", "sparse")


def _env_int(name, default):
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_choice(name, default, choices):
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def _env_flag(name, default):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Every tunable of the clone pipeline. Defaults reproduce the original
    kayak/Koln composite.
    """
    source_path: str = "kayak2012.jpg"
    target_path: str = "koln1997.jpg"
    output_path: str = "clone.jpg"
    resize_factor: int = 8      # source shrink, both axes
    blur_ksize: int = 3         # box kernel side
    display_factor: int = 2     # result shrink before showing
    selection_mode: str = "interactive"
    clone_backend: str = "opencv"
    show_windows: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            source_path=os.getenv("SOURCE_IMAGE_PATH", cls.source_path),
            target_path=os.getenv("TARGET_IMAGE_PATH", cls.target_path),
            output_path=os.getenv("OUTPUT_IMAGE_PATH", cls.output_path),
            resize_factor=_env_int("RESIZE_FACTOR", "8"),
            blur_ksize=_env_int("BLUR_KERNEL_SIZE", "3"),
            display_factor=_env_int("DISPLAY_FACTOR", "2"),
            selection_mode=_env_choice("SELECTION_MODE", "interactive", SELECTION_MODES),
            clone_backend=_env_choice("CLONE_BACKEND", "opencv", CLONE_BACKENDS),
            show_windows=_env_flag("SHOW_WINDOWS", "true"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
