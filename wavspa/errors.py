"""Exception taxonomy for the rendering pipeline.

Every fatal condition derives from WavspaError and carries the exit code the
CLI reports for it. Non-finite magnitudes are not exceptions: the quantizer
substitutes black and counts them.
"""

from __future__ import annotations

from wavspa.util.exit_codes import ExitCode


class WavspaError(Exception):
    exit_code: int = ExitCode.GENERAL_ERROR


class ConfigError(WavspaError, ValueError):
    """Invalid frequency range, thresholds or other job parameters."""

    exit_code = ExitCode.INVALID_CONFIG


class UnsupportedInputError(WavspaError):
    """Input that the pipeline refuses to process (multi-channel, too short)."""

    exit_code = ExitCode.UNSUPPORTED_INPUT


class PipelineIOError(WavspaError, OSError):
    """Reading a sample block or writing the output image failed."""

    exit_code = ExitCode.IO_ERROR


class EngineError(WavspaError, RuntimeError):
    """The transform engine failed or returned a sequence of the wrong length."""

    exit_code = ExitCode.ENGINE_ERROR
