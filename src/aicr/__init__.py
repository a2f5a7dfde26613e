"""AI-assisted code review core: rule engine, LLM providers and caching."""

__version__ = "0.4.0"
