"""Exit codes for the CLI.

Each release failure kind maps to one stable process exit code so CI
pipelines can tell a bad configuration from a failed upload.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success, including "nothing to release"
    - 1: User error (invalid configuration, malformed version)
    - 2: Environment error (git unavailable, not a repository, gh missing)
    - 3: Hook error (prepare/publish command failed or timed out)
    - 4: Network error (release API rejected or unreachable)
    - 5: I/O error (declared artifact missing or corrupt)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    HOOK_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
