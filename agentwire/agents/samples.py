"""Sample agents served by ``agentwire serve`` and their Agent Cards."""

from __future__ import annotations

import re
from typing import Any

from agentwire.a2a.client import RPC_PATH, A2AClient
from agentwire.a2a.models import AgentCapabilities, AgentCard, AgentSkill
from agentwire.agents.llm_agent import LlmAgent
from agentwire.agents.remote import RemoteA2AAgent
from agentwire.agents.router import RouterAgent
from agentwire.agents.tool_agent import ToolAgent
from agentwire.config import AgentWireSettings, settings as default_settings
from agentwire.exceptions import ConfigurationError
from agentwire.kernel.agent import BaseAgent
from agentwire.tools.builtins import register_builtin_tools
from agentwire.tools.registry import ToolRegistry

AGENT_KINDS = ("roll", "prime", "root", "llm")

_SIDES_RE = re.compile(r"(\d+)\s*(?:-\s*)?sided|(\d+)\s+sides|\bd(\d+)\b", re.IGNORECASE)
_INT_RE = re.compile(r"-?\d+")

ROLL_INSTRUCTION = (
    "You roll dice and answer questions about the outcome of the dice rolls. "
    "When asked to roll a die, call the roll_die tool with the number of sides "
    "and report the result."
)

SKILL_EXAMPLES: dict[str, list[str]] = {
    "roll_die": ["Roll a dice of 6 sides.", "Roll a 20-sided die."],
    "check_prime": ["Is 7 a prime number?", "Which of 4, 5, 6 are prime?"],
}


def parse_sides(text: str) -> int:
    """Number of sides asked for in ``text``; 6 when none is given."""
    match = _SIDES_RE.search(text)
    if match is None:
        return 6
    return int(next(g for g in match.groups() if g))


def parse_numbers(text: str) -> list[int]:
    return [int(n) for n in _INT_RE.findall(text)]


def render_roll(response: dict[str, Any]) -> str:
    return f"You rolled a {response['result']}."


def roll_agent(registry: ToolRegistry) -> ToolAgent:
    return ToolAgent(
        "roll_agent",
        "roll_die",
        registry,
        parse_args=lambda text: {"sides": parse_sides(text)},
        render=render_roll,
        description="Handles rolling dice of different sizes.",
    )


def prime_agent(registry: ToolRegistry) -> ToolAgent:
    return ToolAgent(
        "prime_agent",
        "check_prime",
        registry,
        parse_args=lambda text: {"nums": parse_numbers(text)},
        description="Handles checking if numbers are prime.",
    )


def root_agent(registry: ToolRegistry, config: AgentWireSettings) -> RouterAgent:
    roller = roll_agent(registry)
    remote_prime = RemoteA2AAgent(
        "prime_agent",
        config.remote_agent_url,
        client=A2AClient(timeout=config.client_timeout_seconds),
        description="Remote agent that checks whether numbers are prime.",
    )
    return RouterAgent(
        "root_agent",
        routes={"roll": roller, "dice": roller, "die": roller, "prime": remote_prime},
        description="Rolls dice locally and delegates prime checks to a remote agent.",
    )


def llm_agent(registry: ToolRegistry, config: AgentWireSettings) -> LlmAgent:
    if not config.anthropic_api_key:
        raise ConfigurationError("AGENTWIRE_ANTHROPIC_API_KEY is required for the llm agent")
    from agentwire.llm.anthropic import AnthropicProvider

    return LlmAgent(
        "llm_roll_agent",
        AnthropicProvider(api_key=config.anthropic_api_key, model=config.default_model),
        instruction=ROLL_INSTRUCTION,
        registry=registry,
        description="Model-driven dice roller.",
    )


def create_agent(kind: str, config: AgentWireSettings | None = None) -> BaseAgent:
    """Build one of the sample agents by name."""
    config = config or default_settings
    registry = ToolRegistry()
    register_builtin_tools(registry)
    if kind == "roll":
        return roll_agent(registry)
    if kind == "prime":
        return prime_agent(registry)
    if kind == "root":
        return root_agent(registry, config)
    if kind == "llm":
        return llm_agent(registry, config)
    raise ConfigurationError(
        f"Unknown agent {kind!r}; expected one of {', '.join(AGENT_KINDS)}"
    )


def skills_for(agent: BaseAgent) -> list[AgentSkill]:
    """Skills advertised for ``agent``: its tools, then its sub-agents' skills."""
    skills: dict[str, AgentSkill] = {}
    tool_names: list[str] = []
    if isinstance(agent, ToolAgent):
        tool_names = [agent.tool_name]
    elif isinstance(agent, LlmAgent):
        tool_names = [t.name for t in agent.registry.list_tools()]
    schemas = {}
    registry = getattr(agent, "registry", None)
    if registry is not None:
        schemas = {t.name: t for t in registry.list_tools()}
    for name in tool_names:
        schema = schemas[name]
        skills[name] = AgentSkill(
            id=name,
            name=name.replace("_", " ").title(),
            description=schema.description,
            tags=name.split("_"),
            examples=SKILL_EXAMPLES.get(name, []),
        )
    if isinstance(agent, RemoteA2AAgent) and agent.card is not None:
        for skill in agent.card.skills:
            skills.setdefault(skill.id, skill)
    elif isinstance(agent, RemoteA2AAgent):
        skills.setdefault(agent.name, AgentSkill(
            id=agent.name, name=agent.name.replace("_", " ").title(),
            description=agent.description,
        ))
    for sub in agent.sub_agents:
        for skill in skills_for(sub):
            skills.setdefault(skill.id, skill)
    return list(skills.values())


def build_card(agent: BaseAgent, config: AgentWireSettings | None = None) -> AgentCard:
    config = config or default_settings
    return AgentCard(
        name=agent.name,
        description=agent.description,
        url=f"{config.base_url}{RPC_PATH}",
        capabilities=AgentCapabilities(),
        skills=skills_for(agent),
    )
