"""Built-in sample tools: dice rolling and prime checking."""

from __future__ import annotations

import math
import random
from typing import Any

from agentwire.tools.registry import ToolContext, ToolRegistry
from agentwire.tools.schema import ToolParameter, ToolSchema

_rng = random.Random()


async def roll_die(tool_context: ToolContext, sides: int = 6) -> dict[str, Any]:
    """Roll a die and remember the result under the session's ``rolls`` key."""
    sides = max(int(sides), 1)
    result = _rng.randint(1, sides)
    rolls = list(tool_context.get_state("rolls", []))
    rolls.append(result)
    tool_context.set_state("rolls", rolls)
    return {"result": result}


def _is_prime(n: int) -> bool:
    if n <= 1:
        return False
    for i in range(2, math.isqrt(n) + 1):
        if n % i == 0:
            return False
    return True


async def check_prime(tool_context: ToolContext, nums: list[int]) -> dict[str, Any]:
    primes = sorted({int(n) for n in nums if _is_prime(int(n))})
    if not primes:
        result = "No prime numbers found."
    elif len(primes) == 1:
        result = f"{primes[0]} is prime number."
    else:
        result = ", ".join(str(p) for p in primes) + " are prime numbers."
    return {"result": result}


def register_builtin_tools(registry: ToolRegistry) -> None:
    registry.register(
        ToolSchema(
            name="roll_die",
            description="Roll a die with the given number of sides and return the result.",
            parameters=[
                ToolParameter(
                    name="sides", type="integer",
                    description="Number of sides on the die (default 6)",
                    required=False,
                ),
            ],
        ),
        roll_die,
    )
    registry.register(
        ToolSchema(
            name="check_prime",
            description="Check which of the given integers are prime.",
            parameters=[
                ToolParameter(
                    name="nums", type="array", items={"type": "integer"},
                    description="Integers to check",
                ),
            ],
        ),
        check_prime,
    )
