class ActionMapperError(Exception):
    """Base exception for the action mapper service."""


class ConfigurationError(ActionMapperError):
    """Raised when configuration is missing or invalid."""


class ServiceNotInitializedError(ActionMapperError):
    """Raised when the service is used before initialization."""


class EmptyScenarioError(ActionMapperError):
    """Raised when a pipeline run is requested with no steps to map."""


class KnowledgeStoreUnavailableError(ActionMapperError):
    """Raised by a knowledge store that cannot reach its backing index."""


class RankerResponseError(ActionMapperError):
    """Raised when the reasoning backend returns output that cannot be parsed."""
