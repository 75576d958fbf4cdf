"""
View model base

View models hold the state a screen renders and expose async actions.
Actions never raise for expected failures: input problems and store
problems end up in error_message for the screen to show once.
"""

from typing import Awaitable, Optional, TypeVar

from pydantic import ValidationError

from renovation.config import get_logger
from renovation.services.storage import StorageError
from renovation.validation import InputValidationError


logger = get_logger("viewmodels")

T = TypeVar("T")


def describe_error(error: Exception) -> str:
    """The underlying description of a store error, without its action prefix."""
    message = str(error)
    if message.startswith("Failed to ") and ": " in message:
        return message.split(": ", 1)[1]
    return message


class BaseViewModel:
    """Loading flag and transient error message shared by all screens."""

    def __init__(self):
        self.is_loading = False
        self.error_message: Optional[str] = None

    def clear_error(self) -> None:
        self.error_message = None

    async def _run(self, action: str, operation: Awaitable[T]) -> Optional[T]:
        """
        Await an operation, turning expected failures into error_message.

        Check error_message afterwards to tell a failure from a None result.
        """
        self.error_message = None
        try:
            return await operation
        except InputValidationError as e:
            self.error_message = e.message
        except ValidationError as e:
            self.error_message = e.errors()[0].get("msg", str(e))
        except StorageError as e:
            self.error_message = f"Failed to {action}: {describe_error(e)}"

        logger.warning(
            "action_failed",
            view_model=type(self).__name__,
            action=action,
            error=self.error_message,
        )
        return None
