# services/output_layout_service.py
"""
Where outputs land on disk.

• MultiSizeLayout  : <dir>/<base>/<label>_<base>.<fmt>, plus <dir>/<base>/<base>.<fmt>
  holding an unmodified copy of the original.
• SingleSizeLayout : <dir>/<base>_processed.<fmt>, no subfolder, no copy.
"""
from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from ..models.canvas_target import CanvasTarget


class OutputLayoutService:
    """Base layout: outputs next to the source."""

    writes_original: bool = False

    def output_dir(self, source: Path) -> Path:
        return Path(source).parent

    def needs_own_dir(self) -> bool:
        return False

    def original_paths(self, source: Path, formats: Iterable[str]) -> List[Path]:
        return []

    def canvas_paths(self, source: Path, target: CanvasTarget, formats: Iterable[str]) -> List[Path]:
        raise NotImplementedError

    def duplicate_paths(
        self, sources: Iterable[Path], targets: Sequence[CanvasTarget], formats: Sequence[str]
    ) -> Dict[Path, List[Path]]:
        """
        Output paths claimed by more than one source, mapped to those sources.
        Sources sharing a stem (photo.jpg, photo.png) collide; the last one
        written wins.
        """
        claims: Dict[Path, List[Path]] = defaultdict(list)
        for source in sources:
            outputs = set(self.original_paths(source, formats))
            for target in targets:
                outputs.update(self.canvas_paths(source, target, formats))
            for out in outputs:
                claims[out].append(Path(source))
        return {out: owners for out, owners in claims.items() if len(owners) > 1}


class MultiSizeLayout(OutputLayoutService):
    writes_original = True

    def output_dir(self, source: Path) -> Path:
        source = Path(source)
        return source.parent / source.stem

    def needs_own_dir(self) -> bool:
        return True

    def original_paths(self, source: Path, formats: Iterable[str]) -> List[Path]:
        base = Path(source).stem
        return [self.output_dir(source) / f"{base}.{fmt}" for fmt in formats]

    def canvas_paths(self, source: Path, target: CanvasTarget, formats: Iterable[str]) -> List[Path]:
        base = Path(source).stem
        return [self.output_dir(source) / f"{target.label}_{base}.{fmt}" for fmt in formats]


class SingleSizeLayout(OutputLayoutService):
    def __init__(self, suffix: str = "processed"):
        self.suffix = suffix

    def canvas_paths(self, source: Path, target: CanvasTarget, formats: Iterable[str]) -> List[Path]:
        base = Path(source).stem
        return [self.output_dir(source) / f"{base}_{self.suffix}.{fmt}" for fmt in formats]
