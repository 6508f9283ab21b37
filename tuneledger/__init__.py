"""Credit ledger and job lifecycle service for the tuning portal."""

__version__ = "1.0.0"
