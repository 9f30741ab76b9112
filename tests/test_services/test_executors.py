"""Tests for SSHRemoteExecutor."""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import asyncssh
import pytest

from browser_updater.config import (
    Config,
    HostKeyVerifier,
    SSHConfigParser,
    Settings,
)
from browser_updater.models import (
    EnsureDirectoryCommand,
    InstallCommand,
    ProbeRequest,
    Product,
    SSHHost,
)
from browser_updater.protocols import RemoteExecutor
from browser_updater.services.connection import ConnectivityError
from browser_updater.services.executors import (
    SSHRemoteExecutor,
    TransferError,
    to_sftp_path,
)
from browser_updater.services.pool import ConnectionPool
from browser_updater.services.powershell import render_command, render_probe
from browser_updater.utils.shell import encode_powershell


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config with one SSH config host and short timeouts."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("Host lab1\n    HostName 10.0.0.5\n    User admin\n")
    settings = Settings(probe_timeout=30, install_timeout=900, ssh_user="deploy")
    return Config.from_ssh_config(ssh_config, settings=settings)


def _conn(stdout: str = "", stderr: str = "", returncode: int | None = 0) -> AsyncMock:
    conn = AsyncMock()
    conn.run = AsyncMock(
        return_value=MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)
    )
    return conn


def _pool(conn: AsyncMock) -> AsyncMock:
    pool = AsyncMock()
    pool.acquire = AsyncMock(return_value=conn)
    pool.release = MagicMock()
    pool.remove_connection = AsyncMock()
    return pool


def test_executor_satisfies_protocol(config: Config) -> None:
    """SSHRemoteExecutor implements RemoteExecutor."""
    assert isinstance(SSHRemoteExecutor(AsyncMock(), config), RemoteExecutor)


@pytest.mark.parametrize(
    ("windows", "sftp"),
    [
        (r"C:\Windows\Temp\x.msi", "/C:/Windows/Temp/x.msi"),
        (r"D:\staging\FirefoxSetup.exe", "/D:/staging/FirefoxSetup.exe"),
        ("relative\\file.exe", "relative/file.exe"),
    ],
)
def test_to_sftp_path(windows: str, sftp: str) -> None:
    """Windows paths become OpenSSH SFTP paths."""
    assert to_sftp_path(windows) == sftp


@pytest.mark.asyncio
async def test_probe_runs_encoded_powershell(config: Config) -> None:
    """Probes are rendered, encoded and run with the probe timeout."""
    conn = _conn(stdout="114.0.5735.199\r\n")
    executor = SSHRemoteExecutor(_pool(conn), config)
    request = ProbeRequest.file_version(r"C:\Program Files\x.exe")

    result = await executor.probe("lab1", request)

    assert result.ok
    assert result.value == "114.0.5735.199"
    executor.pool.release.assert_called_once_with("lab1", conn)
    conn.run.assert_called_once_with(
        encode_powershell(render_probe(request)), check=False, timeout=30
    )


@pytest.mark.asyncio
async def test_probe_not_found(config: Config) -> None:
    """A non-zero probe exit is a negative answer, not an error."""
    executor = SSHRemoteExecutor(_pool(_conn(returncode=1)), config)

    result = await executor.probe("lab1", ProbeRequest.file_version("C:\\x.exe"))

    assert not result.ok


@pytest.mark.asyncio
async def test_install_uses_install_timeout(config: Config) -> None:
    """Installs get the long timeout; other commands the probe timeout."""
    conn = _conn(returncode=1603, stderr="fatal error")
    executor = SSHRemoteExecutor(_pool(conn), config)
    command = InstallCommand(Product.CHROME, r"C:\t\chrome.msi")

    result = await executor.execute("lab1", command)
    assert result.returncode == 1603
    assert result.error == "fatal error"
    conn.run.assert_called_with(
        encode_powershell(render_command(command)), check=False, timeout=900
    )

    await executor.execute("lab1", EnsureDirectoryCommand(r"C:\t"))
    assert conn.run.call_args.kwargs["timeout"] == 30


@pytest.mark.asyncio
async def test_missing_exit_status_is_failure(config: Config) -> None:
    """A session without exit status is reported as -1."""
    executor = SSHRemoteExecutor(_pool(_conn(returncode=None)), config)

    result = await executor.execute("lab1", EnsureDirectoryCommand(r"C:\t"))

    assert result.returncode == -1
    assert not result.ok


@pytest.mark.asyncio
async def test_bytes_output_is_decoded(config: Config) -> None:
    """Byte streams from asyncssh are decoded."""
    conn = AsyncMock()
    conn.run = AsyncMock(
        return_value=MagicMock(stdout=b"True\r\n", stderr=None, returncode=0)
    )
    executor = SSHRemoteExecutor(_pool(conn), config)

    result = await executor.probe("lab1", ProbeRequest.process_running("chrome"))

    assert result.as_bool


@pytest.mark.asyncio
async def test_resolves_config_and_direct_hosts(config: Config) -> None:
    """SSH config aliases use their entry; other names connect directly."""
    pool = _pool(_conn())
    executor = SSHRemoteExecutor(pool, config)

    await executor.probe("lab1", ProbeRequest.process_running("chrome"))
    await executor.probe("pc-99.corp", ProbeRequest.process_running("chrome"))

    first = pool.acquire.call_args_list[0].args[0]
    second = pool.acquire.call_args_list[1].args[0]
    assert first == SSHHost(name="lab1", hostname="10.0.0.5", user="admin")
    assert second == SSHHost(name="pc-99.corp", hostname="pc-99.corp", user="deploy")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [asyncssh.ConnectionLost("reset"), OSError("broken pipe"), TimeoutError()],
)
async def test_session_errors_are_connectivity_errors(
    config: Config, error: Exception
) -> None:
    """Session loss and timeouts drop the pooled connection."""
    conn = AsyncMock()
    conn.run = AsyncMock(side_effect=error)
    pool = _pool(conn)
    executor = SSHRemoteExecutor(pool, config)

    with pytest.raises(ConnectivityError) as exc_info:
        await executor.probe("lab1", ProbeRequest.process_running("chrome"))

    assert exc_info.value.host_name == "lab1"
    pool.remove_connection.assert_awaited_once_with("lab1")
    pool.release.assert_called_once_with("lab1", conn)


@pytest.mark.asyncio
async def test_unreachable_host_is_connectivity_error(config: Config) -> None:
    """Failing to connect twice is a ConnectivityError."""
    pool = AsyncMock()
    pool.acquire = AsyncMock(side_effect=OSError("no route to host"))
    executor = SSHRemoteExecutor(pool, config)

    with pytest.raises(ConnectivityError, match="no route to host"):
        await executor.execute("lab1", EnsureDirectoryCommand(r"C:\t"))


def _sftp_conn(sftp: AsyncMock) -> AsyncMock:
    conn = AsyncMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=sftp)
    context.__aexit__ = AsyncMock(return_value=False)
    conn.start_sftp_client = MagicMock(return_value=context)
    return conn


@pytest.mark.asyncio
async def test_upload_puts_file(config: Config, tmp_path: Path) -> None:
    """Uploads go through SFTP to the converted path."""
    sftp = AsyncMock()
    executor = SSHRemoteExecutor(_pool(_sftp_conn(sftp)), config)
    local = tmp_path / "chrome.msi"

    await executor.upload("lab1", local, r"C:\Windows\Temp\chrome.msi")

    sftp.put.assert_awaited_once_with(str(local), "/C:/Windows/Temp/chrome.msi")


@pytest.mark.asyncio
async def test_sftp_failure_is_transfer_error(config: Config, tmp_path: Path) -> None:
    """SFTP-level failures keep the connection and raise TransferError."""
    sftp = AsyncMock()
    sftp.put = AsyncMock(side_effect=asyncssh.SFTPFailure("disk full"))
    pool = _pool(_sftp_conn(sftp))
    executor = SSHRemoteExecutor(pool, config)

    with pytest.raises(TransferError) as exc_info:
        await executor.upload("lab1", tmp_path / "x.msi", r"C:\t\x.msi")

    assert exc_info.value.path == r"C:\t\x.msi"
    pool.remove_connection.assert_not_awaited()


@pytest.mark.asyncio
async def test_upload_connection_loss(config: Config, tmp_path: Path) -> None:
    """Losing the session during upload is a ConnectivityError."""
    sftp = AsyncMock()
    sftp.put = AsyncMock(side_effect=asyncssh.ConnectionLost("reset"))
    pool = _pool(_sftp_conn(sftp))
    executor = SSHRemoteExecutor(pool, config)

    with pytest.raises(ConnectivityError):
        await executor.upload("lab1", tmp_path / "x.msi", r"C:\t\x.msi")

    pool.remove_connection.assert_awaited_once_with("lab1")


@pytest.mark.asyncio
async def test_excluded_host_is_never_contacted(tmp_path: Path) -> None:
    """Blocklisted names raise ConnectivityError without opening a session."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("Host dc01\n    HostName 10.0.0.5\n")
    config = Config(
        settings=Settings(),
        parser=SSHConfigParser(config_path=ssh_config, blocklist=["dc01"]),
        host_keys=HostKeyVerifier(known_hosts_path="none", strict_checking=False),
    )
    pool = _pool(_conn())
    executor = SSHRemoteExecutor(pool, config)

    with pytest.raises(ConnectivityError, match="dc01"):
        await executor.probe("dc01", ProbeRequest.process_running("chrome"))

    pool.acquire.assert_not_called()


@pytest.mark.asyncio
async def test_long_install_survives_idle_sweep(config: Config) -> None:
    """A connection running an install is not reclaimed as idle."""
    pool = ConnectionPool(idle_timeout=2)
    executor = SSHRemoteExecutor(pool, config)
    started, finish = asyncio.Event(), asyncio.Event()
    conn = MagicMock()
    conn.is_closed = MagicMock(return_value=False)

    async def slow_install(*args: object, **kwargs: object) -> MagicMock:
        started.set()
        await finish.wait()
        return MagicMock(stdout="", stderr="", returncode=0)

    conn.run = slow_install

    async def connect(*args: object, **kwargs: object) -> MagicMock:
        return conn

    with patch("asyncssh.connect", new=connect):
        install = asyncio.create_task(
            executor.execute("lab1", InstallCommand(Product.CHROME, r"C:\t\c.msi"))
        )
        await started.wait()

        # Well past idle_timeout while the installer is still running
        pool._connections["lab1"].last_used = datetime.now() - timedelta(minutes=10)
        await pool._sweep()
        assert pool.leased_hosts == ["lab1"]
        conn.close.assert_not_called()

        finish.set()
        result = await install

    assert result.ok
    assert pool.leased_hosts == []
    assert pool.active_hosts == ["lab1"]

    pool._connections["lab1"].last_used = datetime.now() - timedelta(minutes=10)
    await pool._sweep()
    conn.close.assert_called_once()
    await pool.close_all()
