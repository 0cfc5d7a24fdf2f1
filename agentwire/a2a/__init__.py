"""A2A (Agent-to-Agent) protocol integration for agentwire.

Implements the ``message/send`` slice of the A2A protocol so that:
- local agents can be served to remote callers (card, executor, server)
- remote agents can be discovered and called as sub-agents (client)
"""
