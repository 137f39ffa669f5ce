"""Shared pydantic field validators.

- password.py: strength rules for new passwords (registration and profile updates)
"""
