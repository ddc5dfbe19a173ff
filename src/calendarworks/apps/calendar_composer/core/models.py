"""Data models for calendar composite runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class ColorPair:
    """Two label colours taken from one image's quantized palette."""

    primary: RGBA
    secondary: RGBA

    @classmethod
    def from_rgb(cls, primary: RGB, secondary: RGB) -> "ColorPair":
        # Palette entries carry no meaningful alpha; labels are always opaque.
        return cls(primary=(*primary, 255), secondary=(*secondary, 255))

    def as_dict(self) -> Dict[str, List[int]]:
        return {"primary": list(self.primary), "secondary": list(self.secondary)}


@dataclass(frozen=True)
class TextLabel:
    """A piece of text drawn at a fixed canvas position."""

    text: str
    position: Tuple[int, int]


@dataclass(frozen=True)
class ImagePair:
    """One month/image combination and the file it produces."""

    month: Path
    image: Path
    output: Path

    @property
    def label(self) -> str:
        return f"{self.month.name} + {self.image.name}"


class PairStatus(str, Enum):
    """Outcome recorded for a pair."""

    OK = "ok"
    FAILED = "failed"
    PLANNED = "planned"


@dataclass
class PairResult:
    pair: ImagePair
    status: PairStatus
    error_kind: Optional[str] = None
    message: Optional[str] = None
    elapsed_s: float = 0.0

    def to_json(self) -> Dict[str, object]:
        return {
            "month": str(self.pair.month),
            "image": str(self.pair.image),
            "output": str(self.pair.output),
            "status": self.status.value,
            "error_kind": self.error_kind,
            "message": self.message,
            "elapsed_s": round(float(self.elapsed_s), 4),
        }


@dataclass
class BatchSummary:
    """All pair outcomes of one run, ordered by output path."""

    results: List[PairResult] = field(default_factory=list)

    def count(self, status: PairStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def failures(self) -> List[PairResult]:
        return [r for r in self.results if r.status == PairStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures
