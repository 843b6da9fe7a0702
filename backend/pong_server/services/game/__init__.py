"""Pong match services: state, physics, slot registry and tick loop.

This package holds the authoritative game logic. Socket handlers and HTTP
routes call into it; it never touches Flask request objects.
"""
