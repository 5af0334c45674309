"""
Scene Graph - read-only lookup over the loaded scenes.

Built once from parser output and never mutated. Choices form an
implicit directed graph over scene ids; cycles (including self-links)
are allowed. The graph reports dangling links but does not repair them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator

from visual_novel.errors import SceneNotFoundError
from visual_novel.story.parser import TableParser
from visual_novel.story.records import SceneRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingTarget:
    """A choice that points at a scene id with no record."""
    scene_id: str
    label: str
    target: str


class SceneGraph:
    """Immutable set of scenes keyed by id.

    Example:
        graph = SceneGraph.from_text(table)

        graph.entry_point               # id of the first row
        graph.resolve("start")          # SceneRecord
        graph.resolve("nope")           # raises SceneNotFoundError
        graph.get("nope")               # None
    """

    def __init__(self, records: Iterable[SceneRecord] = ()):
        ordered: list[SceneRecord] = []
        by_id: dict[str, SceneRecord] = {}

        for record in records:
            if record.scene_id in by_id:
                # First occurrence wins, like a linear find
                logger.warning("Duplicate scene id %r ignored", record.scene_id)
                continue
            by_id[record.scene_id] = record
            ordered.append(record)

        self._records = tuple(ordered)
        self._by_id = MappingProxyType(by_id)

    @classmethod
    def from_records(cls, records: Iterable[SceneRecord]) -> "SceneGraph":
        return cls(records)

    @classmethod
    def from_text(cls, raw_text: str, parser: TableParser | None = None) -> "SceneGraph":
        """Parse a table and build the graph from it."""
        parser = parser or TableParser()
        return cls(parser.parse(raw_text))

    def resolve(self, scene_id: str) -> SceneRecord:
        """Look up a scene by exact id.

        Raises:
            SceneNotFoundError: If no scene has this id.
        """
        try:
            return self._by_id[scene_id]
        except KeyError:
            raise SceneNotFoundError(scene_id) from None

    def get(self, scene_id: str) -> SceneRecord | None:
        """Look up a scene, None if missing."""
        return self._by_id.get(scene_id)

    @property
    def entry_point(self) -> str | None:
        """Id of the first scene in parse order."""
        if not self._records:
            return None
        return self._records[0].scene_id

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(r.scene_id for r in self._records)

    @property
    def records(self) -> tuple[SceneRecord, ...]:
        return self._records

    def missing_targets(self) -> list[MissingTarget]:
        """List every choice whose target has no scene."""
        missing = []
        for record in self._records:
            for choice in record.choices:
                if choice.target not in self._by_id:
                    missing.append(MissingTarget(
                        scene_id=record.scene_id,
                        label=choice.label,
                        target=choice.target,
                    ))
        return missing

    def endings(self) -> list[str]:
        """Ids of scenes with no choices."""
        return [r.scene_id for r in self._records if r.is_ending]

    def __contains__(self, scene_id: object) -> bool:
        return scene_id in self._by_id

    def __iter__(self) -> Iterator[SceneRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __repr__(self) -> str:
        return f"SceneGraph(scenes={len(self)}, entry_point={self.entry_point!r})"


__all__ = [
    "SceneGraph",
    "MissingTarget",
]
