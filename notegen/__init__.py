"""Keyword-to-article generation pipeline built on openai-agents."""

__version__ = "0.1.0"
