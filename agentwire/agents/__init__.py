"""Concrete agents: tool-calling, routing, LLM-backed and remote A2A agents."""
