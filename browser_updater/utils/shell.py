"""PowerShell quoting and encoding utilities."""

import base64


def quote_ps(arg: str) -> str:
    """Quote a string as a PowerShell single-quoted literal.

    Args:
        arg: Raw string (path, process name, argument)

    Returns:
        Literal safe to splice into a PowerShell script
    """
    return "'" + arg.replace("'", "''") + "'"


def encode_powershell(script: str) -> str:
    """Wrap a script into a non-interactive ``powershell`` command line.

    The script travels as base64 UTF-16LE via ``-EncodedCommand`` so no
    shell on the remote side has to interpret its quoting.

    Args:
        script: PowerShell source

    Returns:
        Command line to hand to the remote shell
    """
    encoded = base64.b64encode(script.encode("utf-16-le")).decode("ascii")
    return (
        "powershell.exe -NoProfile -NonInteractive -ExecutionPolicy Bypass "
        f"-EncodedCommand {encoded}"
    )
