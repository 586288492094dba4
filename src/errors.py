"""Error taxonomy shared by the orchestration core.

Every error carries a short code and a message. Layers add context with
with_context() instead of re-wrapping, so callers can still tell a
NotFoundError from a BackendError after it has crossed several layers.
"""

from typing import Optional


class OrchestratorError(Exception):
    """Base exception for orchestrator errors.

    Attributes:
        code: Stable error code (e.g. 'E404')
        message: Human-readable message without context prefixes
        context: Context prefixes, outermost first
        partial_resources: Resources created before an instantiation aborted
        remaining_resources: Resources left undeleted when a destroy aborted
    """

    code = 'E000'

    def __init__(self, message: str, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        self.context: list[str] = []
        self.partial_resources: dict[str, list[str]] = {}
        self.remaining_resources: dict[str, list[str]] = {}
        super().__init__(message)

    def with_context(self, context: str) -> 'OrchestratorError':
        """Prefix the message with context and return the same instance."""
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        return ': '.join(self.context + [self.message])


class NotFoundError(OrchestratorError):
    """A manifest, file, plugin or record does not exist."""
    code = 'E404'


class AlreadyExistsError(OrchestratorError):
    """A record with the same key already exists."""
    code = 'E409'


class InvalidManifestError(OrchestratorError):
    """Input document could not be parsed or has the wrong shape."""
    code = 'E400'


class BackendError(OrchestratorError):
    """Opaque store or transport failure."""
    code = 'E500'


class CapabilityNotFoundError(OrchestratorError):
    """Plugin does not provide a requested capability."""
    code = 'E501'

    def __init__(self, resource_type: str, capability: str):
        self.resource_type = resource_type
        self.capability = capability
        super().__init__(f"Plugin '{resource_type}' has no capability '{capability}'")


class PartialInstantiationError(OrchestratorError):
    """Instantiation failed and compensating cleanup also failed.

    Attributes:
        cause: The error that aborted instantiation
        partial_resources: Resources that are still live
    """
    code = 'E520'

    def __init__(self, cause: Exception, resources: dict[str, list[str]]):
        super().__init__(f"Instantiation aborted with resources left behind: {cause}")
        self.cause = cause
        self.partial_resources = resources


class ManifestNotFoundError(NotFoundError):
    """Bundle manifest file not found."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Manifest not found: {path}")


class ResourceFileMissingError(NotFoundError):
    """A file referenced by the manifest does not exist."""

    def __init__(self, resource_type: str, path):
        self.resource_type = resource_type
        self.path = path
        super().__init__(f"File {path} for resource type '{resource_type}' does not exist")


class ManifestParseError(InvalidManifestError):
    """Manifest could not be parsed."""


class InvalidIntentError(InvalidManifestError):
    """Placement intent has the wrong shape."""


class PluginLoadError(OrchestratorError):
    """Plugin module could not be loaded or registered."""
    code = 'E502'


class PluginInvocationError(BackendError):
    """A plugin capability raised a non-orchestrator exception."""

    def __init__(self, resource_type: str, capability: str, cause: Exception):
        self.resource_type = resource_type
        self.capability = capability
        self.cause = cause
        super().__init__(f"Error in plugin '{resource_type}' {capability}: {cause}")
