"""Exception types raised by the store, LLM and extraction layers.

Library code raises these; the API layer catches them at the route boundary
and turns them into short status strings.
"""

from typing import Any


class CanvasError(Exception):
    """Base class for all canvas errors."""

    status_text = "오류"


class ConfigurationMissingError(CanvasError):
    """A required credential is absent."""

    status_text = "설정 필요"

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Missing required setting: {setting}")


class UpstreamHTTPError(CanvasError):
    """Non-success HTTP response from an external service."""

    status_text = "요청 실패"
    service = "upstream"

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"{self.service} request failed: {status_code} - {body}")


class StoreRequestError(UpstreamHTTPError):
    """Document store returned a non-success, non-404 response."""

    service = "Firestore"


class LLMRequestError(UpstreamHTTPError):
    """Generation endpoint returned a non-success response."""

    service = "Gemini API"


class ResponseShapeError(CanvasError):
    """A parsed response is missing expected fields."""

    status_text = "데이터 형식 오류"


class LLMParseError(CanvasError):
    """LLM output could not be parsed as JSON."""

    def __init__(self, message: str, raw_text: str) -> None:
        self.raw_text = raw_text
        super().__init__(message)


class SessionNotFoundError(CanvasError):
    """Session document does not exist."""

    status_text = "세션 없음"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class ExtractionNotFoundError(CanvasError):
    """No stored extraction exists for a session."""

    status_text = "추출 데이터 없음"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"No extraction stored for session: {session_id}")


class ExtractionError(CanvasError):
    """A batch failed; carries the outcomes completed before the failure."""

    status_text = "추출 실패"

    def __init__(self, message: str, outcomes: list[Any]) -> None:
        self.outcomes = outcomes
        super().__init__(message)
