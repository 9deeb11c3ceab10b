import enum
from typing import Optional


class ErrorCode(str, enum.Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    EXTRACTION_FAILURE = "extraction_failure"
    MISSING_CREDENTIAL = "missing_credential"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    EMPTY_UPSTREAM_RESPONSE = "empty_upstream_response"
    MALFORMED_RESPONSE = "malformed_response"
    SCHEMA_VIOLATION = "schema_violation"
    INTERNAL_ERROR = "internal_error"


class StorygenError(Exception):
    code = ErrorCode.INTERNAL_ERROR

    def to_payload(self) -> dict:
        """Failure payload stored in a Generation's epics column."""
        return {"error": str(self), "code": self.code.value}


# ---------- extraction ----------

class ExtractionError(StorygenError):
    pass


class UnsupportedFormat(ExtractionError):
    code = ErrorCode.UNSUPPORTED_FORMAT

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension or '(none)'}")


class ExtractionFailure(ExtractionError):
    code = ErrorCode.EXTRACTION_FAILURE

    def __init__(self, filename: str, cause: Exception):
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to extract text from file: {cause}")


# ---------- generation ----------

class GenerationError(StorygenError):
    pass


class MissingCredential(GenerationError):
    code = ErrorCode.MISSING_CREDENTIAL

    def __init__(self, message: str = "LLM API key not found. Please set GROQ_API_KEY environment variable."):
        super().__init__(message)


class UpstreamError(GenerationError):
    code = ErrorCode.UPSTREAM_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def from_response(cls, status_code: int, body: str) -> "UpstreamError":
        return cls(f"LLM API error: {status_code} - {body}", status_code=status_code, body=body)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload


class UpstreamTimeout(UpstreamError):
    code = ErrorCode.UPSTREAM_TIMEOUT


class EmptyUpstreamResponse(GenerationError):
    code = ErrorCode.EMPTY_UPSTREAM_RESPONSE

    def __init__(self, message: str = "No content received from LLM API"):
        super().__init__(message)


class MalformedResponse(GenerationError):
    code = ErrorCode.MALFORMED_RESPONSE


class SchemaViolation(GenerationError):
    code = ErrorCode.SCHEMA_VIOLATION
