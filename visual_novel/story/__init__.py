"""
Story Module - table parsing and the scene graph.

Components:
    SceneRecord    - One row of the story table
    TableParser    - Delimited text to SceneRecords
    SceneGraph     - Read-only lookup by scene id

Usage:
    from visual_novel.story import SceneGraph

    graph = SceneGraph.from_text(open("story.csv", encoding="utf-8").read())
    scene = graph.resolve(graph.entry_point)
"""

from visual_novel.story.records import (
    SCENE_FIELDS,
    Choice,
    SceneRecord,
    parse_percent,
)

from visual_novel.story.parser import (
    DELIMITER_STRATEGY,
    MIN_ROW_FIELDS,
    TableParser,
    format_row,
    format_table,
    parse_table,
)

from visual_novel.story.graph import (
    SceneGraph,
    MissingTarget,
)

__all__ = [
    # Records
    "SCENE_FIELDS",
    "Choice",
    "SceneRecord",
    "parse_percent",
    # Parser
    "DELIMITER_STRATEGY",
    "MIN_ROW_FIELDS",
    "TableParser",
    "format_row",
    "format_table",
    "parse_table",
    # Graph
    "SceneGraph",
    "MissingTarget",
]
