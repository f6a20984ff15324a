"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Workflow DSL Core", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")

    # Logging
    log_level: str = Field(default="INFO", description="日志级别")

    # Node defaults（组织未配置时的兜底值）
    default_llm_provider: Literal["openai", "anthropic", "gemini", "vertex"] = Field(
        default="openai", description="agent.run 默认 LLM provider"
    )
    default_llm_model: str = Field(default="gpt-4.1-mini", description="agent.run 默认模型")

    # Graph editor layout
    editor_grid_columns: int = Field(default=4, ge=1, description="默认网格列数")
    editor_grid_origin_x: float = Field(default=60, description="网格原点 x")
    editor_grid_origin_y: float = Field(default=60, description="网格原点 y")
    editor_grid_column_pitch: float = Field(default=260, description="列间距（像素）")
    editor_grid_row_pitch: float = Field(default=140, description="行间距（像素）")
    editor_focus_zoom: float = Field(default=1.2, gt=0, description="聚焦问题节点时的缩放")

    # Validation
    enforce_graph_constraints: bool = Field(
        default=True,
        description="结构校验通过后是否继续校验 DAG / 条件分支 / 并行区域约束",
    )


# 全局配置实例
settings = Settings()
