"""Narrative documentation produced elsewhere and displayed verbatim."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class NarrativeDocument:
    title: str
    text: str

    @property
    def empty(self) -> bool:
        return not self.text.strip()


def load_narrative(path: Union[str, Path]) -> NarrativeDocument:
    """Read a Markdown / text file as an opaque document (no parsing)."""
    p = Path(path)
    return NarrativeDocument(title=p.stem, text=p.read_text(encoding="utf-8"))
