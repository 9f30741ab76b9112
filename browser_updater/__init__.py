"""Fleet browser updater.

Downloads the latest Chrome or Firefox installer once, then checks and
updates Windows hosts over SSH with bounded concurrency.
"""

__version__ = "0.1.0"
