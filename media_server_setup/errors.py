"""Exception hierarchy for the setup steps."""


class SetupError(Exception):
    """Base exception for setup errors."""

    pass


class ExecutionError(SetupError):
    """Raised when command execution fails."""

    pass


class ConfigurationError(SetupError):
    """Raised when a generated configuration file is invalid."""

    pass


class PrivilegeError(SetupError):
    """Raised when insufficient permissions are detected."""

    pass
