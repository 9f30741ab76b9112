"""Render typed probes and commands as PowerShell scripts.

Targets are Windows hosts. Scripts write their answer to stdout and signal
"could not inspect" with a non-zero exit code.
"""

from browser_updater.models import (
    PRODUCTS,
    EnsureDirectoryCommand,
    InstallCommand,
    ProbeKind,
    ProbeRequest,
    RemoteCommand,
    RemoveFileCommand,
)
from browser_updater.utils.shell import quote_ps


def render_probe(request: ProbeRequest) -> str:
    """Render a probe request.

    Raises:
        ValueError: If the probe kind is not supported
    """
    if request.kind is ProbeKind.FILE_VERSION:
        paths = ", ".join(quote_ps(p) for p in request.subjects)
        return (
            f"foreach ($p in @({paths})) {{ "
            "if (Test-Path -LiteralPath $p -PathType Leaf) { "
            "(Get-Item -LiteralPath $p).VersionInfo.ProductVersion; exit 0 "
            "} }; exit 1"
        )

    if request.kind is ProbeKind.PROCESS_RUNNING:
        name = quote_ps(request.subjects[0])
        return (
            f"if (Get-Process -Name {name} -ErrorAction SilentlyContinue) "
            "{ 'True' } else { 'False' }"
        )

    raise ValueError(f"Unsupported probe kind: {request.kind}")


def render_command(command: RemoteCommand) -> str:
    """Render a state-changing command.

    Install scripts block until the installer exits and propagate its exit
    code.

    Raises:
        ValueError: If the command type is not supported
    """
    if isinstance(command, InstallCommand):
        profile = PRODUCTS[command.product]
        if profile.installer_kind == "msi":
            args = ["/i", f'"{command.installer_path}"', *profile.silent_args]
            file_path = "msiexec.exe"
        else:
            args = list(profile.silent_args)
            file_path = command.installer_path
        arg_list = ", ".join(quote_ps(a) for a in args)
        return (
            f"$p = Start-Process -FilePath {quote_ps(file_path)} "
            f"-ArgumentList @({arg_list}) -Wait -PassThru; "
            "exit $p.ExitCode"
        )

    if isinstance(command, EnsureDirectoryCommand):
        return (
            f"New-Item -ItemType Directory -Force -Path {quote_ps(command.path)} "
            "| Out-Null"
        )

    if isinstance(command, RemoveFileCommand):
        path = quote_ps(command.path)
        return (
            f"if (Test-Path -LiteralPath {path}) "
            f"{{ Remove-Item -LiteralPath {path} -Force }}"
        )

    raise ValueError(f"Unsupported command: {type(command).__name__}")
