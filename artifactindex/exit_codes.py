"""
Standard exit codes for artifactindex commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NOT_FOUND = 64           # Project or file not found in the catalog
API_ERROR = 65           # External API call failed (GitHub)
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Publisher not allowed to publish to the repository
DATA_ERROR = 70          # Invalid descriptor or no source repository
PARTIAL_SUCCESS = 71     # Some descriptors were dropped
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'DescriptorParseError': DATA_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}

# Exit codes of publish outcomes, by status
PUBLISH_EXIT_CODES = {
    'success': SUCCESS,
    'invalid_pom': DATA_ERROR,
    'no_github_repo': DATA_ERROR,
    'forbidden': AUTH_ERROR,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ProjectNotFoundError(CommandError):
    """Raised when a project is not in the catalog."""
    def __init__(self, reference: str):
        super().__init__(f"Project not found: {reference}", NOT_FOUND)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class PartialSuccessError(CommandError):
    """Raised when some descriptors were converted and some were dropped."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0, exit_code: Optional[int] = None):
        super().__init__(message, exit_code if exit_code is not None else PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
