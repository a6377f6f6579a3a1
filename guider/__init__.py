"""Guider: resilient completion pipeline for career-guidance conversations."""

__version__ = "0.1.0"
