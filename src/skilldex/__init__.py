"""Skill discovery, knowledge sync and capability dispatch for agents."""

__version__ = "0.1.0"
