"""Tool schema: describes what a tool is and what it accepts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ToolParameter(BaseModel):
    name: str
    type: str = "string"
    description: str
    required: bool = True
    items: dict[str, Any] | None = None  # element schema for "array" parameters


class ToolSchema(BaseModel):
    """Complete description of a tool that agents can use."""

    name: str
    description: str
    parameters: list[ToolParameter] = Field(default_factory=list)

    def to_anthropic_tool(self) -> dict:
        """Convert to Anthropic API tool format."""
        properties: dict[str, Any] = {}
        required: list[str] = []
        for p in self.parameters:
            prop: dict[str, Any] = {"type": p.type, "description": p.description}
            if p.items is not None:
                prop["items"] = p.items
            properties[p.name] = prop
            if p.required:
                required.append(p.name)

        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        }
