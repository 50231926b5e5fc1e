"""
Defines custom exception classes for the application.
"""

class AICommitsException(Exception):
    """Base exception class for aicommits application."""
    pass

class CollectorError(AICommitsException):
    """Raised when staged changes cannot be collected."""
    pass

class DiffError(AICommitsException):
    """Raised when the unified diff for a repository cannot be computed."""
    pass

class ProviderError(AICommitsException):
    """Raised when an error occurs with an LLM provider."""
    pass

class FormatterError(AICommitsException):
    """Raised when the prompt template cannot be loaded or rendered."""
    pass

class ConfigError(AICommitsException):
    """Raised when there is a configuration error."""
    pass
