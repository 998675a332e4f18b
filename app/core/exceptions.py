"""
Domain errors raised by services and routes.

Each error is an HTTPException so FastAPI renders it without extra handlers;
the subclass names let services and tests distinguish failures precisely.
"""

from fastapi import HTTPException, status


class SelfRatingError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot rate your own image",
        )


class InvalidScoreError(HTTPException):
    def __init__(self, score: int) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Rating must be an integer between 1 and 10, got {score}",
        )


class InvalidGranularityError(HTTPException):
    def __init__(self, granularity: str) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown granularity: {granularity}",
        )


class InvalidTopLimitError(HTTPException):
    def __init__(self, top: int, allowed: list[int]) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"top must be one of {allowed}, got {top}",
        )


class SelfFollowError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot follow yourself",
        )


class DuplicateReportError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already reported this image",
        )


class DuplicateFollowError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="You are already following this user",
        )


class UsernameTakenError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="This username is already taken. Please choose another.",
        )


class ProfileExistsError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="A profile already exists for this account",
        )


class ImageNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")


class ProfileNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")


class ReportNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")


class AggregateConsistencyError(HTTPException):
    """The rating write was rolled back because its aggregates could not be recomputed."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not record rating. Please try again.",
        )


class UpstreamServiceError(HTTPException):
    def __init__(self, service: str) -> None:
        self.service = service
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{service} is temporarily unavailable. Please try again.",
        )


class FollowNotFoundError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Not following this user")
