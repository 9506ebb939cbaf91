"""Root exception classes shared across Devflow"""


class DevflowError(Exception):
    """Base exception for all Devflow errors"""
    pass


class UnknownCommandError(DevflowError, ValueError):
    """Raised when a command string names an unknown primary command"""

    def __init__(self, primary: str):
        super().__init__(f"unknown primary command '{primary}'")
        self.primary = primary


class ConfigError(DevflowError):
    """Raised when devflow.toml cannot be read or validated"""
    pass


class PolicyError(DevflowError):
    """Raised when a check profile cannot be resolved"""
    pass
