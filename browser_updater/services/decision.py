"""Outcome classification for a single host.

A pure function of what the worker observed. Rules are evaluated top-down
and the first match wins:

1. degraded                                   -> UNKNOWN
2. old == installer                           -> ALREADY_CURRENT
3. attempted and post == installer            -> UPDATED
4. attempted and post == old and running      -> NEEDS_RESTART
5. attempted and post == old and not running  -> FAILED
6. not attempted                              -> ALREADY_CURRENT
7. anything else                              -> UNKNOWN

Rule 4 exists because a browser that is open during the install keeps
reporting its old version until relaunched even though the new binaries are
on disk.
"""

from dataclasses import dataclass

from browser_updater.models import Outcome
from browser_updater.services.version import Version


@dataclass(frozen=True)
class Observation:
    """Everything the worker learned about one host."""

    old_version: Version | None
    installer_version: Version | None
    attempted_install: bool = False
    post_install_version: Version | None = None
    process_running: bool = False
    degraded: bool = False


def classify(observation: Observation) -> Outcome:
    """Classify a host's outcome from its observations."""
    obs = observation

    if obs.degraded:
        return Outcome.UNKNOWN

    if obs.old_version is not None and obs.old_version == obs.installer_version:
        return Outcome.ALREADY_CURRENT

    if obs.attempted_install:
        post = obs.post_install_version
        if post is not None and post == obs.installer_version:
            return Outcome.UPDATED
        if post == obs.old_version:
            # Both None covers "still not installed after the attempt"
            if obs.process_running:
                return Outcome.NEEDS_RESTART
            return Outcome.FAILED
        return Outcome.UNKNOWN

    return Outcome.ALREADY_CURRENT
