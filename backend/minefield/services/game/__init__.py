"""Game services: the lobby that drives rooms, and per-room chat.

Socket handlers and HTTP routes import from here; nothing in this package
talks to Socket.IO directly, so the whole game can be driven from tests
without a transport.
"""
