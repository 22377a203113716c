from __future__ import annotations


class GovernanceSyncError(Exception):
    """Base error for proposal synchronization failures."""


class ProposalNotFoundError(GovernanceSyncError):
    def __init__(self, index: int, latest_index: int) -> None:
        self.index = index
        self.latest_index = latest_index
        super().__init__(
            f"Proposal index {index} does not exist. Latest proposal index is {latest_index}"
        )


class LedgerReadError(GovernanceSyncError):
    def __init__(self, message: str, *, index: int | None = None) -> None:
        self.index = index
        super().__init__(message)


class CacheUnavailableError(GovernanceSyncError):
    pass
