"""Transient success/error messages for user-triggered actions."""

from enum import Enum

from loguru import logger

from moviestack.api import ApiError


def failure_message(error: Exception, default: str) -> str:
    """User-facing text for a failed call: the server's words, else default."""
    if isinstance(error, ApiError):
        return error.user_message(default)
    return default


class FeedbackKind(Enum):
    SUCCESS = "success"
    ERROR = "error"


class ActionFeedback:
    """Holds the outcome of the most recent mutating action.

    Last write wins: a new report of either kind replaces whatever was
    showing. Nothing is queued or persisted.
    """

    def __init__(self) -> None:
        self.success: str | None = None
        self.error: str | None = None

    def report(self, kind: FeedbackKind, message: str) -> None:
        if kind is FeedbackKind.SUCCESS:
            self.success, self.error = message, None
            logger.info(message)
        else:
            self.success, self.error = None, message
            logger.warning(message)

    def succeed(self, message: str) -> None:
        self.report(FeedbackKind.SUCCESS, message)

    def fail(self, message: str) -> None:
        self.report(FeedbackKind.ERROR, message)

    def clear(self) -> None:
        self.success = None
        self.error = None

    @property
    def kind(self) -> FeedbackKind | None:
        if self.error is not None:
            return FeedbackKind.ERROR
        if self.success is not None:
            return FeedbackKind.SUCCESS
        return None

    @property
    def message(self) -> str | None:
        return self.error if self.error is not None else self.success
