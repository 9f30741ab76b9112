"""Tests for outcome classification."""

import pytest

from browser_updater.models import Outcome
from browser_updater.services.decision import Observation, classify
from browser_updater.services.version import Version

OLD = Version("100.0")
NEW = Version("114.0")
OTHER = Version("110.0")


def test_degraded_is_always_unknown() -> None:
    """Without an installer version nothing can be concluded."""
    assert classify(Observation(OLD, None, degraded=True)) is Outcome.UNKNOWN
    assert classify(Observation(None, None, degraded=True)) is Outcome.UNKNOWN


def test_equal_versions_are_already_current() -> None:
    """old == installer wins regardless of the other observations."""
    for attempted in (False, True):
        for running in (False, True):
            obs = Observation(
                NEW,
                NEW,
                attempted_install=attempted,
                post_install_version=OTHER,
                process_running=running,
            )
            assert classify(obs) is Outcome.ALREADY_CURRENT


def test_successful_install_is_updated() -> None:
    """Post-install version matching the installer is UPDATED."""
    obs = Observation(OLD, NEW, attempted_install=True, post_install_version=NEW)
    assert classify(obs) is Outcome.UPDATED


def test_first_install_is_updated() -> None:
    """A host that had no browser ends up UPDATED once installed."""
    obs = Observation(None, NEW, attempted_install=True, post_install_version=NEW)
    assert classify(obs) is Outcome.UPDATED


@pytest.mark.parametrize(
    ("running", "expected"),
    [(True, Outcome.NEEDS_RESTART), (False, Outcome.FAILED)],
)
def test_unchanged_version_depends_on_process(running: bool, expected: Outcome) -> None:
    """An unchanged version means restart needed if running, else failure."""
    obs = Observation(
        OLD,
        NEW,
        attempted_install=True,
        post_install_version=OLD,
        process_running=running,
    )
    assert classify(obs) is expected


def test_still_not_installed_is_failed() -> None:
    """Install attempted on a host without the browser and still nothing."""
    obs = Observation(None, NEW, attempted_install=True, post_install_version=None)
    assert classify(obs) is Outcome.FAILED


def test_unexpected_post_version_is_unknown() -> None:
    """A third version after the install cannot be classified."""
    obs = Observation(OLD, NEW, attempted_install=True, post_install_version=OTHER)
    assert classify(obs) is Outcome.UNKNOWN


def test_failed_post_probe_is_unknown() -> None:
    """Losing the installed version after the install is UNKNOWN."""
    obs = Observation(OLD, NEW, attempted_install=True, post_install_version=None)
    assert classify(obs) is Outcome.UNKNOWN


def test_not_attempted_is_already_current() -> None:
    """Skipping the install means the host was already newer."""
    assert classify(Observation(Version("120.0"), NEW)) is Outcome.ALREADY_CURRENT
