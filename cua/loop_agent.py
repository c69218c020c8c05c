"""A tool-using model agent and the loop that repeats it until the task ends."""

from __future__ import annotations

import dataclasses
import itertools
import re
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from cua.events import Event, FunctionCall, Part

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "EXIT_TOOLS",
    "CUAConfig",
    "CoordinatorConfig",
    "LlmAgent",
    "LoopAgent",
    "default_cua_config",
    "default_coordinator_config",
    "new_cua_agent",
    "new_cua_agent_with_config",
    "new_coordinator_agent",
    "new_coordinator_agent_with_config",
]

DEFAULT_MAX_ITERATIONS = 50
EXIT_TOOLS = frozenset({"complete_task", "need_help"})

# A model receives the instruction, the conversation so far and the tool names,
# and returns the parts of its reply.
Model = Callable[[str, Sequence[Event], Sequence[str]], Iterable[Part]]
Tool = Callable[[dict[str, Any]], Any]

_DEFAULT_INSTRUCTION = (
    "You are a desktop automation agent. You can see the screen and control "
    "the computer to accomplish tasks.\n\n"
    "## DYNAMIC CONTEXT\n{task_context}\n\n"
    "Execute exactly one tool call per turn. Call complete_task when the task "
    "is fully accomplished, or need_help when you are stuck.\n"
)

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(\??)\}")


@dataclass
class CUAConfig:
    """Configuration of the looping automation agent."""

    model: Any = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS


@dataclass
class CoordinatorConfig:
    """Configuration of the coordinator, which is the looping agent itself."""

    model: Any = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS


def default_cua_config() -> CUAConfig:
    """Return the default agent configuration."""
    return CUAConfig()


def default_coordinator_config() -> CoordinatorConfig:
    """Return the default coordinator configuration."""
    return CoordinatorConfig()


def _inject_state(template: str, state: Mapping[str, Any]) -> str:
    """Replace ``{key}`` placeholders with state values; ``{key?}`` may be missing."""

    def replace(match: re.Match[str]) -> str:
        key, optional = match.group(1), match.group(2)
        if key in state:
            return str(state[key])
        if optional:
            return ""
        raise KeyError(f"state key {key!r} not found for instruction")

    return _PLACEHOLDER.sub(replace, template)


def _as_history(message: str | Sequence[Event]) -> list[Event]:
    if isinstance(message, str):
        return [Event(author="user", parts=[Part(text=message)])]
    return list(message)


class LlmAgent:
    """Asks the model for its next move and runs the tools it calls.

    A run ends when the model answers without calling a tool, or when it
    calls one of the exit tools, whose response event escalates.
    """

    def __init__(
        self,
        name: str,
        model: Model | None,
        description: str = "",
        instruction: str = "",
        tools: Mapping[str, Tool] | None = None,
        exit_tools: Iterable[str] = EXIT_TOOLS,
    ) -> None:
        self.name = name
        self.model = model
        self.description = description
        self.instruction = instruction
        self.tools: dict[str, Tool] = dict(tools or {})
        for tool_name, tool in self.tools.items():
            if not callable(tool):
                raise TypeError(f"tool {tool_name!r} is not callable")
        self.exit_tools = frozenset(exit_tools)

    def run(
        self, message: str | Sequence[Event], state: Mapping[str, Any]
    ) -> Iterator[Event]:
        """Yield the model's events and tool responses until the turn is over."""
        if self.model is None:
            raise ValueError(f"agent {self.name!r} has no model")
        history = _as_history(message)
        tool_names = list(self.tools)

        while True:
            instruction = _inject_state(self.instruction, state)
            parts = list(self.model(instruction, list(history), tool_names))
            reply = Event(author=self.name, parts=parts)
            history.append(reply)
            yield reply

            calls = [p.function_call for p in parts if p.function_call is not None]
            if not calls:
                return

            escalate = False
            for call in calls:
                response = yield from self._call_tool(call)
                history.append(response)
                yield response
                escalate = escalate or response.escalate
            if escalate:
                return

    def _call_tool(self, call: FunctionCall) -> Iterator[Event]:
        tool = self.tools.get(call.name)
        if tool is None:
            message = f"unknown tool: {call.name}"
            yield Event(author=self.name, error=LookupError(message))
            result: Any = {"error": message}
        else:
            result = tool(dict(call.args or {}))
        return Event(
            author=self.name,
            parts=[Part(function_response={"name": call.name, "response": result})],
            escalate=call.name in self.exit_tools,
        )


class LoopAgent:
    """Runs its sub-agents over and over until one escalates.

    ``max_iterations`` of zero or less means no limit.
    """

    def __init__(
        self,
        name: str,
        sub_agents: Sequence[Any],
        description: str = "",
        max_iterations: int = 0,
    ) -> None:
        self.name = name
        self.sub_agents = list(sub_agents)
        self.description = description
        self.max_iterations = max_iterations

    def run(
        self, message: str | Sequence[Event], state: Mapping[str, Any]
    ) -> Iterator[Event]:
        """Yield every sub-agent event until an escalation or the iteration limit."""
        history = _as_history(message)
        rounds: Iterable[int] = (
            range(self.max_iterations) if self.max_iterations > 0 else itertools.count()
        )
        for _ in rounds:
            for agent in self.sub_agents:
                for event in agent.run(list(history), state):
                    if event.error is None:
                        history.append(event)
                    yield event
                    if event.escalate:
                        return


def new_cua_agent(
    model: Model | None,
    tools: Mapping[str, Tool] | None = None,
    instruction: str | None = None,
) -> LoopAgent:
    """Create the looping automation agent with the default iteration limit."""
    return new_cua_agent_with_config(
        CUAConfig(model=model, max_iterations=DEFAULT_MAX_ITERATIONS), tools, instruction
    )


def new_cua_agent_with_config(
    cfg: CUAConfig,
    tools: Mapping[str, Tool] | None = None,
    instruction: str | None = None,
) -> LoopAgent:
    """Create the looping automation agent from a configuration."""
    if cfg.max_iterations <= 0:
        cfg = dataclasses.replace(cfg, max_iterations=DEFAULT_MAX_ITERATIONS)
    cua = LlmAgent(
        name="cua",
        model=cfg.model,
        description=(
            "Desktop automation agent using ReAct pattern. "
            "Observes screen, thinks, and acts."
        ),
        instruction=_DEFAULT_INSTRUCTION if instruction is None else instruction,
        tools=tools,
    )
    return LoopAgent(
        name="cua_loop",
        sub_agents=[cua],
        description=(
            "ReAct loop that continues until task is complete or help is needed."
        ),
        max_iterations=cfg.max_iterations,
    )


def new_coordinator_agent(
    model: Model | None,
    tools: Mapping[str, Tool] | None = None,
    instruction: str | None = None,
) -> LoopAgent:
    """Create the coordinator with the default iteration limit."""
    return new_coordinator_agent_with_config(
        CoordinatorConfig(model=model, max_iterations=DEFAULT_MAX_ITERATIONS),
        tools,
        instruction,
    )


def new_coordinator_agent_with_config(
    cfg: CoordinatorConfig,
    tools: Mapping[str, Tool] | None = None,
    instruction: str | None = None,
) -> LoopAgent:
    """Create the coordinator from a configuration."""
    max_iterations = cfg.max_iterations if cfg.max_iterations > 0 else DEFAULT_MAX_ITERATIONS
    return new_cua_agent_with_config(
        CUAConfig(model=cfg.model, max_iterations=max_iterations), tools, instruction
    )