"""
Domain errors raised by the rewards engine and its collaborators.
Routers translate them into HTTP responses.
"""


class CreatorScoreError(Exception):
    """Base class for creator score errors."""


class InvalidScoreError(CreatorScoreError, ValueError):
    """Raised when an entry carries a negative or non-numeric score."""

    def __init__(self, entry_id: str, score: object):
        super().__init__(f"Invalid score {score!r} for entry '{entry_id}'")
        self.entry_id = entry_id
        self.score = score


class TalentAPIError(CreatorScoreError):
    """Raised when the Talent Protocol API fails or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProfileParseError(CreatorScoreError, ValueError):
    """Raised when a Talent profile payload cannot be normalized."""


class DecisionAlreadyMadeError(CreatorScoreError):
    """Raised when a creator tries to change a recorded rewards decision."""

    def __init__(self, talent_uuid: str, existing: str):
        super().__init__(f"Creator {talent_uuid} already decided: {existing}")
        self.talent_uuid = talent_uuid
        self.existing = existing


class SnapshotExistsError(CreatorScoreError):
    """Raised when a leaderboard snapshot has already been frozen."""


class StorageError(CreatorScoreError):
    """Raised when a Supabase read or write returns no usable data."""
