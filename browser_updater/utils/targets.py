"""Target list parsing."""

from pathlib import Path

_FORBIDDEN_CHARS = ("/", "\\", ";", "&", "|", "$", "`", "'", '"', " ", "\t", "\x00")


def validate_host(host: str) -> str:
    """Validate a target host name.

    Args:
        host: Host name, IP address or SSH config alias

    Returns:
        The stripped host name

    Raises:
        ValueError: If host name is empty or contains invalid characters
    """
    host = host.strip()
    if not host:
        raise ValueError("Host cannot be empty")
    if len(host) > 253:
        raise ValueError(f"Host name too long: {len(host)} chars")
    for char in _FORBIDDEN_CHARS:
        if char in host:
            raise ValueError(f"Host contains invalid characters: {host!r}")
    return host


def parse_host_lines(text: str) -> list[str]:
    """Parse newline-delimited host names.

    Blank lines and lines starting with ``#`` are ignored; trailing
    ``# comments`` are stripped.
    """
    hosts = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            hosts.append(validate_host(line))
    return hosts


def load_targets(target: str) -> list[str]:
    """Turn a command line TARGET into a list of host names.

    TARGET is the path of a host list file when such a file exists,
    otherwise a single host name.

    Raises:
        ValueError: If the file holds no hosts or a name is invalid
        OSError: If the host list file cannot be read
    """
    path = Path(target).expanduser()
    if path.is_file():
        hosts = parse_host_lines(path.read_text(encoding="utf-8-sig"))
        if not hosts:
            raise ValueError(f"No hosts listed in {path}")
        return hosts
    return [validate_host(target)]
