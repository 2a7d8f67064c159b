import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

OUTPUT_DIR_NAME = "compressed-result"


class ResizeMode(Enum):
    PAD = "Pad"
    BOX_PAD = "BoxPad"
    CROP = "Crop"
    MAX = "Max"
    MIN = "Min"
    STRETCH = "Stretch"
    MANUAL = "Manual"

    @classmethod
    def parse(cls, name, default=None):
        """Look up a mode by name, unknown names warn and give ``default``."""
        default = default or cls.PAD

        if isinstance(name, cls):
            return name

        key = (name or "").strip().replace("_", "").replace("-", "").lower()

        for mode in cls:
            if key == mode.value.lower():
                return mode

        logger.warning(f'Unknown resize mode "{name}", using {default.value}')
        return default


def bound(value):
    return value if value and value > 0 else None


def clamp(quality):
    return min(max(int(quality), 1), 100)


@dataclass(frozen=True)
class Job:
    source: Path
    output: Path
    width: Optional[int] = None
    height: Optional[int] = None
    mode: ResizeMode = ResizeMode.PAD
    quality: int = 75
    format: Optional[str] = None
    workers: int = 1

    def __post_init__(self):
        object.__setattr__(self, "width", bound(self.width))
        object.__setattr__(self, "height", bound(self.height))
        object.__setattr__(self, "quality", clamp(self.quality))
        object.__setattr__(self, "workers", max(int(self.workers), 1))

        if self.format is not None:
            format = self.format.strip().lstrip(".").lower()
            object.__setattr__(self, "format", format or None)

    @classmethod
    def create(
        cls,
        source,
        output=None,
        width=None,
        height=None,
        mode="Pad",
        quality=75,
        format=None,
        workers=None,
    ):
        source = Path(source).expanduser()
        output = Path(output).expanduser() if output else source / OUTPUT_DIR_NAME

        return cls(
            source=source,
            output=output,
            width=width,
            height=height,
            mode=ResizeMode.parse(mode),
            quality=quality,
            format=format,
            workers=workers or os.cpu_count() or 1,
        )

    @property
    def box(self):
        return self.width or 0, self.height or 0
