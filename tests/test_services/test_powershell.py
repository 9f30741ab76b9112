"""Tests for PowerShell rendering."""

import base64

import pytest

from browser_updater.models import (
    EnsureDirectoryCommand,
    InstallCommand,
    ProbeKind,
    ProbeRequest,
    Product,
    RemoteCommand,
    RemoveFileCommand,
)
from browser_updater.services.powershell import render_command, render_probe
from browser_updater.utils.shell import encode_powershell, quote_ps


def test_quote_ps_doubles_single_quotes() -> None:
    """Single quotes are escaped PowerShell style."""
    assert quote_ps("C:\\it's here") == "'C:\\it''s here'"


def test_encode_powershell_round_trips() -> None:
    """Encoded command carries the script as UTF-16LE base64."""
    line = encode_powershell("Write-Output 'hi'")
    assert line.startswith("powershell.exe -NoProfile -NonInteractive")
    encoded = line.rsplit(" ", 1)[1]
    assert base64.b64decode(encoded).decode("utf-16-le") == "Write-Output 'hi'"


def test_file_version_probe_checks_paths_in_order() -> None:
    """The first existing path answers with its ProductVersion."""
    script = render_probe(ProbeRequest.file_version(r"C:\a\chrome.exe", r"C:\b\chrome.exe"))
    assert r"@('C:\a\chrome.exe', 'C:\b\chrome.exe')" in script
    assert "VersionInfo.ProductVersion" in script
    assert script.endswith("exit 1")


def test_file_version_probe_needs_a_path() -> None:
    """An empty path list is rejected."""
    with pytest.raises(ValueError):
        ProbeRequest.file_version()


def test_process_probe() -> None:
    """Process probe prints True or False."""
    script = render_probe(ProbeRequest.process_running("firefox"))
    assert "Get-Process -Name 'firefox'" in script
    assert "'True'" in script and "'False'" in script


def test_unknown_probe_kind() -> None:
    """Unsupported probes are rejected."""
    request = ProbeRequest(kind=ProbeKind.PROCESS_RUNNING, subjects=("x",))
    object.__setattr__(request, "kind", "bogus")
    with pytest.raises(ValueError, match="Unsupported probe"):
        render_probe(request)


def test_msi_install_runs_msiexec_and_waits() -> None:
    """Chrome installs via msiexec with quiet flags."""
    script = render_command(InstallCommand(Product.CHROME, r"C:\t\chrome.msi"))
    assert "-FilePath 'msiexec.exe'" in script
    assert "'/i', '\"C:\\t\\chrome.msi\"', '/qn', '/norestart'" in script
    assert "-Wait -PassThru" in script
    assert script.endswith("exit $p.ExitCode")


def test_sfx_install_runs_installer_silently() -> None:
    """Firefox installs by running the setup with /S."""
    script = render_command(InstallCommand(Product.FIREFOX, r"C:\t\FirefoxSetup.exe"))
    assert r"-FilePath 'C:\t\FirefoxSetup.exe'" in script
    assert "-ArgumentList @('/S')" in script


def test_directory_and_remove_commands() -> None:
    """Staging commands are idempotent."""
    mkdir = render_command(EnsureDirectoryCommand(r"C:\Windows\Temp\bu"))
    assert "New-Item -ItemType Directory -Force" in mkdir

    remove = render_command(RemoveFileCommand(r"C:\Windows\Temp\bu\x.msi"))
    assert remove.startswith("if (Test-Path -LiteralPath")
    assert "Remove-Item -LiteralPath 'C:\\Windows\\Temp\\bu\\x.msi' -Force" in remove


def test_unknown_command() -> None:
    """Unsupported commands are rejected."""
    with pytest.raises(ValueError, match="Unsupported command"):
        render_command(RemoteCommand())
