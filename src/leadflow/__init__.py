"""Leadflow: upload contact lists and distribute them across sales agents."""

__version__ = "0.1.0"
