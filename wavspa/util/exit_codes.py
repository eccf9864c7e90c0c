"""Documented exit codes for the wavspa CLI.

Exit codes follow UNIX conventions:
- 0: Success
- 1: General/unspecified error
- 2: Invalid configuration or command-line arguments
- 3-5: Application-specific errors

Usage:
    from wavspa.util.exit_codes import ExitCode
    sys.exit(ExitCode.UNSUPPORTED_INPUT)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for wavspa processes.

    Attributes:
        SUCCESS: Image written.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_CONFIG: Frequency range, thresholds or other options rejected.
        UNSUPPORTED_INPUT: Input is multi-channel or shorter than one block.
        IO_ERROR: Reading the input or writing the image failed.
        ENGINE_ERROR: The transform engine failed or produced bad output.
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_CONFIG: int = 2
    UNSUPPORTED_INPUT: int = 3
    IO_ERROR: int = 4
    ENGINE_ERROR: int = 5

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_CONFIG: "Invalid configuration",
            cls.UNSUPPORTED_INPUT: "Unsupported input",
            cls.IO_ERROR: "I/O error",
            cls.ENGINE_ERROR: "Transform engine error",
        }
        return messages.get(code, f"Unknown exit code {code}")
