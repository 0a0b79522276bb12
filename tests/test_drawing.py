"""Tests for drawing actions and the drawing log."""

from __future__ import annotations

import pytest

from doodle_py.game.drawing import (
    DEFAULT_COLOR,
    MAX_POINTS_PER_SEGMENT,
    Clear,
    DrawingLog,
    Fill,
    Stroke,
    Undo,
    parse_drawing_action,
)
from doodle_py.game.exceptions import InvalidDrawingActionError
from doodle_py.game.types import DrawingTool


def pencil(*points: tuple[float, float], start: bool = False, color: str = DEFAULT_COLOR) -> Stroke:
    return Stroke(tool=DrawingTool.PENCIL, points=points, color=color, is_start_of_line=start)


class TestParseDrawingAction:
    """Test parsing drawing actions from their wire form."""

    def test_pencil(self) -> None:
        """Test both point notations are accepted."""
        action = parse_drawing_action(
            {
                "tool": "pencil",
                "points": [[1, 2], {"x": 3.5, "y": 4}],
                "color": "#ff0000",
                "width": 8,
                "isStartOfLine": True,
                "strokeId": 99,
            },
        )

        assert action == Stroke(
            tool=DrawingTool.PENCIL,
            points=((1.0, 2.0), (3.5, 4.0)),
            color="#ff0000",
            width=8.0,
            is_start_of_line=True,
        )

    def test_fill_clear_undo(self) -> None:
        """Test the non-stroke tools."""
        assert parse_drawing_action({"tool": "fill", "x": 10, "y": 20}) == Fill(x=10.0, y=20.0)
        assert parse_drawing_action({"tool": "clear"}) == Clear()
        assert parse_drawing_action({"tool": "undo"}) == Undo()

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {"tool": "spray"},
            {"tool": "pencil"},
            {"tool": "pencil", "points": []},
            {"tool": "pencil", "points": [[1, 2, 3]]},
            {"tool": "pencil", "points": [[True, 2]]},
            {"tool": "pencil", "points": [[1, 2]], "width": 0},
            {"tool": "eraser", "points": [[1, 2]], "color": ""},
            {"tool": "fill", "x": "10", "y": 20},
        ],
    )
    def test_invalid(self, payload: object) -> None:
        """Test malformed payloads are rejected."""
        with pytest.raises(InvalidDrawingActionError):
            parse_drawing_action(payload)

    def test_too_many_points(self) -> None:
        """Test oversized segments are rejected."""
        points = [[0, 0]] * (MAX_POINTS_PER_SEGMENT + 1)
        with pytest.raises(InvalidDrawingActionError):
            parse_drawing_action({"tool": "pencil", "points": points})


class TestDrawingLog:
    """Test gesture grouping, undo and clear."""

    def test_segments_share_gesture_id(self) -> None:
        """Test continuation segments join the open gesture."""
        log = DrawingLog()

        first = log.append(pencil((0, 0), (1, 1), start=True))
        second = log.append(pencil((1, 1), (2, 2)))
        third = log.append(pencil((5, 5), start=True))

        assert first.stroke_id == second.stroke_id == 1
        assert third.stroke_id == 2

    def test_pen_change_opens_gesture(self) -> None:
        """Test a different color starts a new gesture even without the start flag."""
        log = DrawingLog()

        log.append(pencil((0, 0), start=True))
        changed = log.append(pencil((1, 1), color="#00ff00"))

        assert changed.stroke_id == 2

    def test_fill_is_own_gesture(self) -> None:
        """Test fills get their own id and close the open stroke."""
        log = DrawingLog()

        log.append(pencil((0, 0), start=True))
        fill = log.append(Fill(x=1, y=1))
        after = log.append(pencil((2, 2)))

        assert fill.stroke_id == 2
        assert after.stroke_id == 3

    def test_undo_removes_whole_gesture(self) -> None:
        """Test undo drops every segment of the last gesture."""
        log = DrawingLog()
        log.append(Fill(x=0, y=0))
        log.append(pencil((0, 0), start=True))
        log.append(pencil((1, 1)))

        removed = log.undo()

        assert len(removed) == 2
        assert [e.stroke_id for e in log.entries] == [1]
        assert DrawingLog().undo() == []

    def test_ids_are_not_reused(self) -> None:
        """Test ids keep increasing after undo and clear."""
        log = DrawingLog()
        log.append(pencil((0, 0), start=True))
        log.undo()
        log.append(pencil((0, 0), start=True))
        log.clear()

        entry = log.append(pencil((0, 0), start=True))

        assert entry.stroke_id == 3
        assert len(log) == 1

    def test_to_list(self) -> None:
        """Test serialized entries carry their ids."""
        log = DrawingLog()
        log.append(pencil((0, 0), (1, 1), start=True))
        log.append(Fill(x=3, y=4, color="#123456"))

        assert log.to_list() == [
            {
                "tool": "pencil",
                "points": [[0, 0], [1, 1]],
                "color": DEFAULT_COLOR,
                "width": 5.0,
                "isStartOfLine": True,
                "strokeId": 1,
            },
            {"tool": "fill", "x": 3, "y": 4, "color": "#123456", "strokeId": 2},
        ]
