"""Mini README: Core package initializer for WealthTracker.

WealthTracker records daily cash and coin takings, derives dashboard
statistics from them, and runs a small pairing service that hands a ledger
snapshot from one client to another through a short-lived 4-digit code.
Only the logging helper is re-exported here so importing the package stays
free of web framework dependencies.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
