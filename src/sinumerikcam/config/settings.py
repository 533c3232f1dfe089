"""Application preferences (persisted to disk)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from ..core.stock import StockDescription
from .defaults import ARC_SAMPLES, DEFAULT_PROGRAM_NAME, SAFE_Z, build_default_stock


@dataclass
class AppSettings:
    """User preferences, serialized to ~/.sinumerikcam/settings.json."""

    program_name: str = DEFAULT_PROGRAM_NAME
    safe_z: float = SAFE_Z
    arc_samples: int = ARC_SAMPLES
    last_save_dir: str = ""
    default_stock: dict = field(
        default_factory=lambda: build_default_stock().to_dict()
    )

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".sinumerikcam" / "settings.json"

    def stock(self) -> StockDescription:
        return StockDescription.from_dict(self.default_stock)

    def save(self, path: Optional[Path] = None) -> None:
        p = path or self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self), indent=2))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppSettings":
        p = path or cls._path()
        if p.exists():
            data = json.loads(p.read_text())
            return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        return cls()
