"""Custom exception hierarchy for the CAO engine."""


class CAOEngineError(Exception):
    """Base exception for all CAO engine errors."""


class ConfigurationError(CAOEngineError):
    """Error in system configuration, e.g. a hook built without its credential."""


class GenerationError(CAOEngineError):
    """Error calling the completion service."""


class ProviderError(CAOEngineError):
    """A verification provider returned an error response."""


class DiscoveryError(CAOEngineError):
    """Error in the source discovery store or evaluation run."""
