"""GraphLayout - 画布默认布局

没有记录位置的节点按下标放进网格：
    col = index % columns, row = index // columns
    x = origin_x + col * column_pitch, y = origin_y + row * row_pitch
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.config import Settings, settings
from src.domain.value_objects.position import Position


@dataclass(frozen=True, slots=True)
class GridLayout:
    columns: int = 4
    origin_x: float = 60
    origin_y: float = 60
    column_pitch: float = 260
    row_pitch: float = 140

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "GridLayout":
        config = config or settings
        return cls(
            columns=config.editor_grid_columns,
            origin_x=config.editor_grid_origin_x,
            origin_y=config.editor_grid_origin_y,
            column_pitch=config.editor_grid_column_pitch,
            row_pitch=config.editor_grid_row_pitch,
        )

    def default_position(self, index: int) -> Position:
        col = index % self.columns
        row = index // self.columns
        return Position(
            x=self.origin_x + col * self.column_pitch,
            y=self.origin_y + row * self.row_pitch,
        )

    def next_free_position(self, start_index: int, occupied: Iterable[Position]) -> Position:
        """从 start_index 开始找第一个没有被占用的网格位置"""
        taken = set(occupied)
        index = start_index
        while True:
            candidate = self.default_position(index)
            if candidate not in taken:
                return candidate
            index += 1
