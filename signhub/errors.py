"""
Error types for signhub.

None of these is fatal to the display loop: callers recover by retrying,
keeping the last good dataset, or falling back to fixed constants.
"""


class SignhubError(Exception):
    """Base class for signhub errors."""


class FetchFailure(SignhubError):
    """Network, HTTP status, or parse error while fetching the dataset."""


class EmptyActiveSet(SignhubError):
    """The active screen set came out empty (the notices fallback should prevent this)."""


class UnmeasurableLayout(SignhubError):
    """The notices block or its viewport could not be measured."""
