from __future__ import annotations


class GeneratorError(RuntimeError):
    """Base class for failures raised by text generators."""

    def __init__(self, message: str, *, error_kind: str = "GENERATOR_ERROR"):
        super().__init__(message)
        self.error_kind = str(error_kind)


class GeneratorUnavailableError(GeneratorError):
    """Raised when a rewrite request fails or returns no usable text."""


class GeneratorConfigError(ValueError):
    """Raised when the configured generator provider cannot be built."""


GENERATOR_ERROR_TIMEOUT = "GENERATOR_TIMEOUT"
GENERATOR_ERROR_NETWORK = "GENERATOR_NETWORK"
GENERATOR_ERROR_HTTP_STATUS = "GENERATOR_HTTP_STATUS"
GENERATOR_ERROR_EMPTY_OUTPUT = "GENERATOR_EMPTY_OUTPUT"
