"""Agent Card registry: the static identity document served for discovery."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
from pydantic import ValidationError

from agentwire.a2a.models import AgentCard
from agentwire.exceptions import AgentCardResolutionError, ConfigurationError

_logger = logging.getLogger(__name__)


class AgentCardRegistry:
    """Holds one validated AgentCard for the life of the process.

    The JSON form is rendered once, so every discovery call returns the
    same bytes.
    """

    def __init__(self, card: AgentCard) -> None:
        validate_card(card)
        self._card = card
        self._json = orjson.dumps(
            card.model_dump(by_alias=True, mode="json", exclude_none=True)
        )
        _logger.info("Agent card ready: %s (%d skills) at %s", card.name, len(card.skills), card.url)

    def get_card(self) -> AgentCard:
        return self._card

    def card_json(self) -> bytes:
        return self._json

    @classmethod
    def from_file(cls, path: Path) -> AgentCardRegistry:
        return cls(load_card_file(path))


def validate_card(card: AgentCard) -> None:
    if not card.name.strip():
        raise ConfigurationError("Agent card name must not be empty")
    if not card.url.strip():
        raise ConfigurationError(f"Agent card {card.name!r} must have a url")
    seen: set[str] = set()
    for skill in card.skills:
        if skill.id in seen:
            raise ConfigurationError(
                f"Agent card {card.name!r} declares skill id {skill.id!r} more than once"
            )
        seen.add(skill.id)


def load_card_file(path: Path) -> AgentCard:
    """Read an AgentCard from a JSON file."""
    try:
        return AgentCard.model_validate(orjson.loads(Path(path).read_bytes()))
    except FileNotFoundError as e:
        raise AgentCardResolutionError(f"Agent card file not found: {path}") from e
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise AgentCardResolutionError(f"Agent card file {path} is not a valid card: {e}") from e
