"""Mini README: Network interfaces for WealthTracker.

Exports the FastAPI application factory for the pairing service. The
command line entry point lives in ``wealth_tracker_cli.py`` at the project
root.
"""

from .web_app import create_application

__all__ = ["create_application"]
