"""Exception classes for the Extension system"""

from devflow.core.errors import DevflowError


class ExtensionError(DevflowError):
    """Base exception for all extension-related errors"""
    pass


class NoCapabilityError(ExtensionError):
    """Raised when no registered extension advertises a command"""

    def __init__(self, capability: str):
        super().__init__(f"no extension exposes capability '{capability}'")
        self.capability = capability


class TargetValidationError(ExtensionError):
    """Raised when a target profile lists a command nothing can run"""

    def __init__(self, profile: str, command: str, reason: str):
        super().__init__(
            f"target profile '{profile}' lists unsupported command '{command}': {reason}"
        )
        self.profile = profile
        self.command = command


class ExtensionConfigError(ExtensionError):
    """Raised when a configured extension cannot be set up"""
    pass
