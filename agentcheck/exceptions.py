"""Project-specific exception types for clearer error semantics."""

class AgentCheckError(Exception):
    """Base class for agent-check errors."""
    pass

class ConfigError(AgentCheckError, ValueError):
    """Startup configuration errors (missing or malformed settings)."""
    pass
