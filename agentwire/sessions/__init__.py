"""Conversation sessions: state and event history per (app, user, session id).

- Session: one ongoing conversation, owned by the session service
- InMemorySessionService: create / get / delta / append with per-session locking
"""
