class EngineError(Exception):
    """Base class for errors raised by the task engine."""


class ConfigurationError(EngineError):
    """Raised when TASKFLOW_ENGINE settings cannot be interpreted."""
