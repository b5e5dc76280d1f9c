"""Registration error types."""


class RegistrationError(ValueError):
    """Base class for registration contract errors."""


class InvalidInputError(RegistrationError):
    """Caller passed unusable input (empty text, malformed user record).

    A programmer error, never a user-facing condition.
    """


class LLMError(RuntimeError):
    """The LLM provider failed or returned no usable completion."""
