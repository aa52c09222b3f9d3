"""Exception hierarchy for fileseek."""


class FileSeekError(Exception):
    """Base exception for all fileseek errors."""

    exit_code: int = 1
    user_message: str = "An error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


# Query Errors
class QueryError(FileSeekError):
    """Errors in the query itself."""

    exit_code = 2
    user_message = "Invalid query"


class QueryParseError(QueryError):
    """Query string could not be parsed."""

    exit_code = 3
    user_message = "Could not parse query"

    def __init__(
        self,
        message: str | None = None,
        *,
        position: int | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.position = position


class InvalidPatternError(QueryError):
    """A regular expression literal failed to compile."""

    exit_code = 4
    user_message = "Invalid regular expression pattern"

    def __init__(
        self,
        pattern: str,
        reason: str | None = None,
        *,
        user_message: str | None = None,
    ) -> None:
        message = f"Invalid regular expression pattern: {pattern}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, user_message=user_message)
        self.pattern = pattern
        self.reason = reason


class InvalidNearArgumentsError(QueryError):
    """NEAR received a bad distance or a sub-expression without positions.

    Evaluation logs this and treats the NEAR node as not matching.
    """

    exit_code = 5
    user_message = "Invalid NEAR arguments"


# Content Errors
class ContentError(FileSeekError):
    """Errors while reading or scanning content."""

    exit_code = 10
    user_message = "Content error"


class ContentTooLargeError(ContentError):
    """Content or file exceeds the configured size limit."""

    exit_code = 11
    user_message = "Content is too large"

    def __init__(
        self,
        size: int,
        limit: int,
        *,
        path: str | None = None,
        user_message: str | None = None,
    ) -> None:
        subject = f"File {path}" if path else "Content"
        super().__init__(
            f"{subject} is too large: {size} bytes (max: {limit} bytes)",
            user_message=user_message,
        )
        self.size = size
        self.limit = limit
        self.path = path


class FileReadError(ContentError):
    """A file could not be stat'ed or read."""

    exit_code = 12
    user_message = "Cannot read file"

    def __init__(
        self,
        path: str,
        reason: str | None = None,
        *,
        user_message: str | None = None,
    ) -> None:
        message = f"Cannot read file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, user_message=user_message)
        self.path = path
        self.reason = reason


# Cache Errors
class CacheError(FileSeekError):
    """Cache registry errors."""

    exit_code = 20
    user_message = "Cache error"


# Config Errors
class ConfigError(FileSeekError):
    """Configuration errors."""

    exit_code = 30
    user_message = "Configuration error"


class ConfigValidationError(ConfigError):
    """Configuration validation failed."""

    exit_code = 31
    user_message = "Invalid configuration"
