"""Domain errors shared by the forum modules.

Every error carries a stable ``code`` that routers map to an HTTP status
(see ``handle_forum_error``). Storage-layer exceptions are never wrapped in
these classes; they propagate unchanged.
"""

from fastapi import HTTPException, status


class ForumError(Exception):
    """Base forum error."""

    def __init__(self, message: str, code: str = "forum_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidVoteValueError(ForumError):
    """Vote value is not +1 or -1."""

    def __init__(self, message: str = "Vote value must be 1 or -1"):
        super().__init__(message, "invalid_vote_value")


class SubjectNotFoundError(ForumError):
    """Vote or acceptance target does not exist."""

    def __init__(
        self, message: str = "Subject not found", code: str = "subject_not_found"
    ):
        super().__init__(message, code)


class PostNotFoundError(SubjectNotFoundError):
    """Post not found."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message, "post_not_found")


class CommentNotFoundError(SubjectNotFoundError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class CourseNotFoundError(ForumError):
    """Course not found."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class InvalidParentError(ForumError):
    """Reply target is missing or belongs to another post."""

    def __init__(self, message: str = "Parent comment does not belong to this post"):
        super().__init__(message, "invalid_parent")


class AuthorizationError(ForumError):
    """Requester is not allowed to perform the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


class ConsistencyError(ForumError):
    """Referenced records disagree with each other (e.g. comment/post mismatch)."""

    def __init__(self, message: str = "Comment does not belong to this post"):
        super().__init__(message, "consistency_error")


class VoteConflictError(ForumError):
    """Concurrent votes by the same user kept invalidating the conditional write."""

    def __init__(self, message: str = "Vote changed concurrently, please retry"):
        super().__init__(message, "vote_conflict")


class SequenceExhaustedError(ForumError):
    """Id sequence could not be advanced under contention."""

    def __init__(self, message: str = "Could not allocate an identifier"):
        super().__init__(message, "sequence_contention")


_STATUS_MAP = {
    "invalid_vote_value": status.HTTP_400_BAD_REQUEST,
    "subject_not_found": status.HTTP_404_NOT_FOUND,
    "post_not_found": status.HTTP_404_NOT_FOUND,
    "comment_not_found": status.HTTP_404_NOT_FOUND,
    "course_not_found": status.HTTP_404_NOT_FOUND,
    "invalid_parent": status.HTTP_400_BAD_REQUEST,
    "permission_denied": status.HTTP_403_FORBIDDEN,
    "consistency_error": status.HTTP_409_CONFLICT,
    "vote_conflict": status.HTTP_409_CONFLICT,
    "sequence_contention": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def handle_forum_error(error: ForumError) -> HTTPException:
    """Convert forum errors to HTTP exceptions.

    Args:
        error: Forum error

    Returns:
        HTTPException with appropriate status code
    """
    status_code = _STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
