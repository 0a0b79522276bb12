"""Drawing actions and the replicated drawing log.

The log holds only :class:`Stroke` and :class:`Fill` entries; :class:`Clear`
and :class:`Undo` are control operations applied to it. Every entry gets a
server-assigned ``stroke_id`` when it is appended: consecutive stroke segments
of one gesture share an id, so undo removes a whole gesture at once.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from doodle_py.game.exceptions import InvalidDrawingActionError
from doodle_py.game.types import DrawingTool

DEFAULT_COLOR = "#000000"
DEFAULT_WIDTH = 5.0
MAX_POINTS_PER_SEGMENT = 1000

Point = tuple[float, float]


@dataclass(frozen=True)
class Stroke:
    """A pencil or eraser segment.

    Attributes:
        tool: ``pencil`` or ``eraser``.
        points: Ordered canvas coordinates.
        color: CSS color string.
        width: Line width in pixels.
        is_start_of_line: True for the first segment of a gesture.
        stroke_id: Gesture id assigned by the log.
    """

    tool: DrawingTool
    points: tuple[Point, ...]
    color: str = DEFAULT_COLOR
    width: float = DEFAULT_WIDTH
    is_start_of_line: bool = False
    stroke_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tool": self.tool.value,
            "points": [[x, y] for x, y in self.points],
            "color": self.color,
            "width": self.width,
            "isStartOfLine": self.is_start_of_line,
            "strokeId": self.stroke_id,
        }


@dataclass(frozen=True)
class Fill:
    """A flood fill starting at a point."""

    x: float
    y: float
    color: str = DEFAULT_COLOR
    stroke_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tool": DrawingTool.FILL.value,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "strokeId": self.stroke_id,
        }


@dataclass(frozen=True)
class Clear:
    """Wipe the canvas."""


@dataclass(frozen=True)
class Undo:
    """Remove the most recent gesture."""


LogEntry = Stroke | Fill
DrawingAction = Stroke | Fill | Clear | Undo


def _as_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidDrawingActionError(f"'{name}' must be a number")
    return float(value)


def _number(data: dict[str, Any], key: str) -> float:
    return _as_number(data.get(key), key)


def _color(data: dict[str, Any]) -> str:
    color = data.get("color", DEFAULT_COLOR)
    if not isinstance(color, str) or not color.strip():
        raise InvalidDrawingActionError("'color' must be a non-empty string")
    return color.strip()


def _point(raw: Any) -> Point:
    if isinstance(raw, dict):
        return (_number(raw, "x"), _number(raw, "y"))
    if isinstance(raw, list | tuple) and len(raw) == 2:
        return (_as_number(raw[0], "x"), _as_number(raw[1], "y"))
    raise InvalidDrawingActionError("points must be [x, y] pairs or {x, y} objects")


def parse_drawing_action(data: Any) -> DrawingAction:
    """Build a drawing action from its wire form.

    Args:
        data: Object with a ``tool`` key and tool specific fields.

    Returns:
        The parsed action. Client supplied stroke ids are ignored.

    Raises:
        InvalidDrawingActionError: If the payload is malformed.
    """
    if not isinstance(data, dict):
        raise InvalidDrawingActionError("Drawing action must be an object")
    try:
        tool = DrawingTool(data.get("tool"))
    except ValueError as exc:
        raise InvalidDrawingActionError(f"Unknown drawing tool: {data.get('tool')!r}") from exc

    match tool:
        case DrawingTool.CLEAR:
            return Clear()
        case DrawingTool.UNDO:
            return Undo()
        case DrawingTool.FILL:
            return Fill(x=_number(data, "x"), y=_number(data, "y"), color=_color(data))
        case DrawingTool.PENCIL | DrawingTool.ERASER:
            raw_points = data.get("points")
            if not isinstance(raw_points, list) or not raw_points:
                raise InvalidDrawingActionError("'points' must be a non-empty list")
            if len(raw_points) > MAX_POINTS_PER_SEGMENT:
                raise InvalidDrawingActionError(f"A segment may hold at most {MAX_POINTS_PER_SEGMENT} points")
            width = _number(data, "width") if "width" in data else DEFAULT_WIDTH
            if width <= 0:
                raise InvalidDrawingActionError("'width' must be positive")
            return Stroke(
                tool=tool,
                points=tuple(_point(p) for p in raw_points),
                color=_color(data),
                width=width,
                is_start_of_line=bool(data.get("isStartOfLine", False)),
            )
    raise InvalidDrawingActionError(f"Unsupported drawing tool: {tool}")


class DrawingLog:
    """Ordered record of the strokes and fills on the current canvas.

    Replaying :attr:`entries` onto an empty canvas reproduces what the
    drawer sees.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._next_id = 1
        self._open_stroke: Stroke | None = None

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        """Current log entries, oldest first."""
        return tuple(self._entries)

    def append(self, action: LogEntry) -> LogEntry:
        """Append a stroke segment or fill, assigning its gesture id.

        A segment continues the open gesture when it is not flagged as a line
        start and uses the same tool, color and width. Anything else opens a
        new gesture. Each fill is its own gesture.

        Returns:
            The stored entry with ``stroke_id`` set.
        """
        if isinstance(action, Stroke):
            previous = self._open_stroke
            if previous is not None and not action.is_start_of_line and self._same_pen(previous, action):
                stroke_id = previous.stroke_id
            else:
                stroke_id = self._allocate_id()
            entry: LogEntry = dataclasses.replace(action, stroke_id=stroke_id)
            self._open_stroke = entry
        else:
            entry = dataclasses.replace(action, stroke_id=self._allocate_id())
            self._open_stroke = None
        self._entries.append(entry)
        return entry

    def undo(self) -> list[LogEntry]:
        """Remove the most recent gesture.

        Returns:
            The removed entries, oldest first. Empty when the log is empty.
        """
        if not self._entries:
            return []
        group = self._entries[-1].stroke_id
        removed: list[LogEntry] = []
        while self._entries and self._entries[-1].stroke_id == group:
            removed.append(self._entries.pop())
        self._open_stroke = None
        removed.reverse()
        return removed

    def clear(self) -> None:
        """Truncate the log to empty."""
        self._entries.clear()
        self._open_stroke = None

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize every entry for replay on a client."""
        return [entry.to_dict() for entry in self._entries]

    def _allocate_id(self) -> int:
        stroke_id = self._next_id
        self._next_id += 1
        return stroke_id

    @staticmethod
    def _same_pen(a: Stroke, b: Stroke) -> bool:
        return a.tool == b.tool and a.color == b.color and a.width == b.width
