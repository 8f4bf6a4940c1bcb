from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFound(ServiceError):
    def __init__(self, message: str = "Student not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class InvalidPlan(ServiceError):
    def __init__(self, plan: object) -> None:
        super().__init__(f"Invalid enrollment plan: {plan}", status.HTTP_400_BAD_REQUEST)


class InvalidAdjustment(ServiceError):
    def __init__(self, message: str = "Adjustment must be 1 or -1.") -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class InsufficientCredits(ServiceError):
    def __init__(self, message: str = "Student has no recovery credits.") -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class CancellationWindowClosed(ServiceError):
    def __init__(self, hours_limit: int) -> None:
        super().__init__(
            f"You can only cancel a recovery class {hours_limit} hours before the class starts.",
            status.HTTP_400_BAD_REQUEST,
        )


class ConcurrentUpdate(ServiceError):
    """Raised when the student account changed between read and write."""

    def __init__(self, message: str = "Student account was modified concurrently, retry the request.") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
