"""节点配置 Schema（Pydantic）- Workflow DSL 各节点类型的 config 模型

业务定义：
- 每种节点类型对应一个 config 模型，只用于校验
- 编辑器中原始 JSON payload 才是真实数据，这里声明的默认值不会写入持久化文档

数值上下界只声明一次（*_BOUNDS），编辑器输入限幅复用同一份
（见 node_config_inputs.clamp_int）。
"""

from __future__ import annotations

import math
import re
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    StringConstraints,
    field_validator,
    model_validator,
)

# ========================================
# Bounds
# ========================================

MAX_TURNS_BOUNDS = (1, 64)
MAX_TOOL_CALLS_BOUNDS = (0, 200)
TIMEOUT_MS_BOUNDS = (1000, 10 * 60 * 1000)
MAX_OUTPUT_CHARS_BOUNDS = (256, 1_000_000)
MAX_RUNTIME_CHARS_BOUNDS = (1024, 2_000_000)
TEAM_MAX_PARALLEL_BOUNDS = (1, 16)
TEAM_SIZE_BOUNDS = (1, 32)

# Relative to the agent.run / teammate config, e.g. ("limits", "maxTurns").
AGENT_LIMIT_BOUNDS: dict[str, tuple[int, int]] = {
    "maxTurns": MAX_TURNS_BOUNDS,
    "maxToolCalls": MAX_TOOL_CALLS_BOUNDS,
    "timeoutMs": TIMEOUT_MS_BOUNDS,
    "maxOutputChars": MAX_OUTPUT_CHARS_BOUNDS,
    "maxRuntimeChars": MAX_RUNTIME_CHARS_BOUNDS,
}

DEFAULT_AGENT_LIMITS: dict[str, int] = {
    "maxTurns": 8,
    "maxToolCalls": 20,
    "timeoutMs": 60_000,
    "maxOutputChars": 50_000,
    "maxRuntimeChars": 200_000,
}

LLM_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "gemini", "vertex")
AGENT_ENGINES: tuple[str, ...] = ("vespid.loop.v1", "claude.agent-sdk.v1", "codex.sdk.v1")
DEFAULT_AGENT_ENGINE = "vespid.loop.v1"
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
CONDITION_OPS: tuple[str, ...] = ("eq", "neq", "contains", "exists", "gt", "gte", "lt", "lte")

_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_REPO_RE = re.compile(r"^[^/]+/[^/]+$")


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def _check_uuid(value: str) -> str:
    if not is_uuid(value):
        raise ValueError("must be a UUID")
    return value


def _check_uuid_or_empty(value: str) -> str:
    if value and not is_uuid(value):
        raise ValueError("must be a UUID or an empty string")
    return value


def _check_repo(value: str) -> str:
    if not _REPO_RE.match(value):
        raise ValueError("must look like owner/name")
    return value


def _bounded_int(bounds: tuple[int, int]) -> Any:
    low, high = bounds
    return Annotated[int, Field(strict=True, ge=low, le=high)]


def _text(min_length: int = 0, max_length: int | None = None) -> Any:
    return Annotated[
        str, StringConstraints(strict=True, min_length=min_length, max_length=max_length)
    ]


NonEmptyStr = _text(1)
UuidStr = Annotated[StrictStr, AfterValidator(_check_uuid)]
UuidOrEmptyStr = Annotated[StrictStr, AfterValidator(_check_uuid_or_empty)]
RepoStr = Annotated[StrictStr, AfterValidator(_check_repo)]
ModelStr = _text(1, 120)
ToolIdStr = _text(1, 120)
LongText = _text(0, 200_000)
LongNonEmptyText = _text(1, 200_000)
SelectorLabel = _text(1, 64)
ConnectorKey = _text(1, 80)
TeammateId = _text(1, 64)
DisplayName = _text(1, 120)
IssueTitle = _text(1, 256)
UrlStr = _text(1, 2000)
ConditionPath = _text(1, 500)

MaxTurns = _bounded_int(MAX_TURNS_BOUNDS)
MaxToolCalls = _bounded_int(MAX_TOOL_CALLS_BOUNDS)
TimeoutMs = _bounded_int(TIMEOUT_MS_BOUNDS)
MaxOutputChars = _bounded_int(MAX_OUTPUT_CHARS_BOUNDS)
MaxRuntimeChars = _bounded_int(MAX_RUNTIME_CHARS_BOUNDS)
TeamMaxParallel = _bounded_int(TEAM_MAX_PARALLEL_BOUNDS)


class DslModel(BaseModel):
    """Base for every DSL schema model (unknown keys are ignored)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ========================================
# Shared pieces
# ========================================


class ExecutionSelector(DslModel):
    """Pins remote execution to an agent tag, a specific agent or a group."""

    tag: SelectorLabel | None = None
    agentId: UuidStr | None = None
    group: SelectorLabel | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "ExecutionSelector":
        chosen = [key for key in ("tag", "agentId", "group") if getattr(self, key) is not None]
        if len(chosen) != 1:
            raise ValueError("selector must set exactly one of tag, agentId, group")
        return self


class NodeExecution(DslModel):
    mode: Literal["cloud", "node"] = "cloud"
    selector: ExecutionSelector | None = None


class ConnectorSecretDefault(DslModel):
    secretId: UuidStr


class ToolAuthDefaults(DslModel):
    connectors: dict[ConnectorKey, ConnectorSecretDefault] | None = None


class AgentPrompt(DslModel):
    system: LongText | None = None
    instructions: LongNonEmptyText
    inputTemplate: LongText | None = None


class AgentLimits(DslModel):
    maxTurns: MaxTurns = DEFAULT_AGENT_LIMITS["maxTurns"]
    maxToolCalls: MaxToolCalls = DEFAULT_AGENT_LIMITS["maxToolCalls"]
    timeoutMs: TimeoutMs = DEFAULT_AGENT_LIMITS["timeoutMs"]
    maxOutputChars: MaxOutputChars = DEFAULT_AGENT_LIMITS["maxOutputChars"]
    maxRuntimeChars: MaxRuntimeChars = DEFAULT_AGENT_LIMITS["maxRuntimeChars"]


class AgentOutput(DslModel):
    mode: Literal["text", "json"] = "text"
    jsonSchema: Any = None


# ========================================
# agent.run
# ========================================


class LlmAuth(DslModel):
    secretId: UuidStr | None = None
    # The runtime falls back to provider env vars (e.g. OPENAI_API_KEY).
    fallbackToEnv: Literal[True] = True


class AgentLlm(DslModel):
    provider: Literal["openai", "anthropic", "gemini", "vertex"] = "openai"
    model: ModelStr = "gpt-4.1-mini"
    auth: LlmAuth = Field(default_factory=LlmAuth)


class AgentEngine(DslModel):
    id: Literal["vespid.loop.v1", "claude.agent-sdk.v1", "codex.sdk.v1"] = DEFAULT_AGENT_ENGINE


class AgentTools(DslModel):
    allow: list[ToolIdStr]
    execution: Literal["cloud", "node"] = "cloud"
    authDefaults: ToolAuthDefaults | None = None


class TeammateLlm(DslModel):
    model: ModelStr


class TeammateTools(DslModel):
    allow: list[ToolIdStr]
    # Teammates run tools in cloud only.
    execution: Literal["cloud"] = "cloud"
    authDefaults: ToolAuthDefaults | None = None


class Teammate(DslModel):
    id: TeammateId
    displayName: DisplayName | None = None
    llm: TeammateLlm | None = None
    prompt: AgentPrompt
    tools: TeammateTools
    limits: AgentLimits
    output: AgentOutput


class AgentTeam(DslModel):
    mode: Literal["supervisor"]
    maxParallel: TeamMaxParallel = 3
    leadMode: Literal["delegate_only", "normal"] = "normal"
    teammates: list[Teammate] = Field(
        min_length=TEAM_SIZE_BOUNDS[0], max_length=TEAM_SIZE_BOUNDS[1]
    )

    @field_validator("teammates")
    @classmethod
    def _unique_teammate_ids(cls, teammates: list[Teammate]) -> list[Teammate]:
        seen: set[str] = set()
        for teammate in teammates:
            if not teammate.id.strip():
                raise ValueError("teammate id must not be blank")
            if teammate.id in seen:
                raise ValueError(f"duplicate teammate id: {teammate.id}")
            seen.add(teammate.id)
        return teammates


class AgentRunConfig(DslModel):
    toolsetId: UuidStr | None = None
    llm: AgentLlm
    execution: NodeExecution = Field(default_factory=NodeExecution)
    engine: AgentEngine | None = None
    prompt: AgentPrompt
    tools: AgentTools = Field(default_factory=lambda: AgentTools(allow=[]))
    limits: AgentLimits = Field(default_factory=AgentLimits)
    output: AgentOutput = Field(default_factory=AgentOutput)
    team: AgentTeam | None = None

    @model_validator(mode="after")
    def _engine_requires_node_execution(self) -> "AgentRunConfig":
        engine_id = self.engine.id if self.engine is not None else DEFAULT_AGENT_ENGINE
        if engine_id != DEFAULT_AGENT_ENGINE and self.execution.mode != "node":
            raise ValueError("agent.run engine requires execution.mode=node")
        return self


# ========================================
# agent.execute
# ========================================


class AgentExecuteTask(DslModel):
    type: Literal["shell"]
    script: LongNonEmptyText
    shell: Literal["sh", "bash"] | None = None
    env: dict[NonEmptyStr, StrictStr] | None = None


class SandboxDocker(DslModel):
    image: NonEmptyStr | None = None


class AgentExecuteSandbox(DslModel):
    backend: Literal["docker", "host", "provider"] | None = None
    network: Literal["none", "enabled"] | None = None
    timeoutMs: TimeoutMs | None = None
    docker: SandboxDocker | None = None
    envPassthroughAllowlist: list[NonEmptyStr] | None = Field(default=None, max_length=50)


class AgentExecuteConfig(DslModel):
    execution: NodeExecution | None = None
    task: AgentExecuteTask | None = None
    sandbox: AgentExecuteSandbox | None = None


# ========================================
# connector.action / legacy github issue
# ========================================


class ConnectorActionAuth(DslModel):
    # "" means the secret has not been chosen yet.
    secretId: UuidOrEmptyStr


class ConnectorActionConfig(DslModel):
    connectorId: NonEmptyStr
    actionId: NonEmptyStr
    input: Any = None
    auth: ConnectorActionAuth
    execution: NodeExecution | None = None


class LegacySecretAuth(DslModel):
    secretId: UuidStr


class GithubIssueCreateConfig(DslModel):
    repo: RepoStr
    title: IssueTitle
    body: LongText | None = None
    auth: LegacySecretAuth


# ========================================
# http.request
# ========================================


class HttpRequestConfig(DslModel):
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
    url: UrlStr
    headers: dict[NonEmptyStr, StrictStr] | None = None
    body: Any = None


# ========================================
# condition / parallel.join
# ========================================


def is_json_scalar(value: Any) -> bool:
    if value is None or isinstance(value, (str, bool, int)):
        return True
    return isinstance(value, float) and math.isfinite(value)


class ConditionConfig(DslModel):
    path: ConditionPath
    op: Literal["eq", "neq", "contains", "exists", "gt", "gte", "lt", "lte"]
    value: Any = None

    @field_validator("value")
    @classmethod
    def _scalar_value(cls, value: Any) -> Any:
        if not is_json_scalar(value):
            raise ValueError("value must be a string, number, boolean or null")
        return value

    @model_validator(mode="after")
    def _value_presence_matches_op(self) -> "ConditionConfig":
        has_value = "value" in self.model_fields_set
        if self.op == "exists" and has_value:
            raise ValueError("value is not allowed when op is exists")
        if self.op != "exists" and not has_value:
            raise ValueError(f"value is required when op is {self.op}")
        return self


class ParallelJoinConfig(DslModel):
    mode: Literal["all"] = "all"
    failFast: StrictBool = True
