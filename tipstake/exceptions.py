"""
TipStake Exceptions

Custom exception classes shared across the TipStake package.
"""


class TipStakeException(Exception):
    """Base exception for TipStake."""
    pass


class ConfigurationError(TipStakeException):
    """Configuration error."""
    pass


class StoreError(TipStakeException):
    """State store read/write error."""
    pass
