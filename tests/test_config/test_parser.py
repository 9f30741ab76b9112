"""Tests for SSHConfigParser."""

from pathlib import Path

import pytest

from browser_updater.config.parser import SSHConfigParser
from browser_updater.models import SSHHost


@pytest.fixture
def sample_ssh_config(tmp_path: Path) -> Path:
    """Create sample SSH config file."""
    config = tmp_path / "ssh_config"
    config.write_text("""
# Lab machines
Host *
    User fleetadmin
    IdentityFile ~/.ssh/fleet_key

Host lab-01
    HostName 10.20.0.11
    Port 2222

Host lab-02
    HostName 10.20.0.12
    User Administrator
    Port notaport

Host lab-*
    User ignored

Host alias-only
    User nobody
""")
    return config


def test_parse_ssh_config(sample_ssh_config: Path) -> None:
    """Concrete hosts are extracted with global defaults applied."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert set(hosts) == {"lab-01", "lab-02"}
    lab1 = hosts["lab-01"]
    assert lab1.hostname == "10.20.0.11"
    assert lab1.port == 2222
    assert lab1.user == "fleetadmin"
    assert lab1.identity_file == str(Path.home() / ".ssh" / "fleet_key")


def test_host_values_override_defaults(sample_ssh_config: Path) -> None:
    """Per-host values win; a bad port falls back to 22."""
    lab2 = SSHConfigParser(sample_ssh_config).parse()["lab-02"]

    assert lab2.user == "Administrator"
    assert lab2.port == 22


def test_user_left_unset_without_defaults(tmp_path: Path) -> None:
    """Without a User line the user is None for the caller to fill in."""
    config = tmp_path / "ssh_config"
    config.write_text("Host pc\n    HostName 10.0.0.1\n")

    assert SSHConfigParser(config).parse()["pc"] == SSHHost(
        name="pc", hostname="10.0.0.1"
    )


def test_parse_respects_allowlist(sample_ssh_config: Path) -> None:
    """Only allowlisted hosts are returned."""
    hosts = SSHConfigParser(sample_ssh_config, allowlist=["lab-02"]).parse()
    assert list(hosts) == ["lab-02"]


def test_parse_respects_blocklist(sample_ssh_config: Path) -> None:
    """Blocklisted hosts are dropped."""
    hosts = SSHConfigParser(sample_ssh_config, blocklist=["lab-02"]).parse()
    assert list(hosts) == ["lab-01"]


def test_missing_config_returns_empty(tmp_path: Path) -> None:
    """A missing SSH config means no configured hosts."""
    assert SSHConfigParser(tmp_path / "nope").parse() == {}
