"""Plain-text rendering of batch results."""

from collections import Counter

from browser_updater.models import HostResult, Outcome

COLUMNS = (
    "ComputerName",
    "Old_Version",
    "Installer_Version",
    "Current_Version",
    "Updated",
)


def _cell(value: object | None) -> str:
    return "" if value is None else str(value)


def result_row(result: HostResult) -> tuple[str, ...]:
    """Table cells for one host, in COLUMNS order."""
    return (
        result.host_name,
        _cell(result.old_version),
        _cell(result.installer_version),
        _cell(result.new_version),
        result.outcome.label,
    )


def summarize(results: list[HostResult]) -> str:
    """One-line count of outcomes, e.g. ``3 host(s): Updated=2, Failed=1``."""
    counts = Counter(r.outcome for r in results)
    parts = [f"{o.label}={counts[o]}" for o in Outcome if counts[o]]
    return f"{len(results)} host(s): " + ", ".join(parts)


def format_report(results: list[HostResult]) -> str:
    """Render results as an aligned table followed by a summary line.

    Args:
        results: Batch results in input order

    Returns:
        Multi-line report text
    """
    rows = [COLUMNS] + [result_row(r) for r in results]
    widths = [max(len(row[i]) for row in rows) for i in range(len(COLUMNS))]

    def line(cells: tuple[str, ...]) -> str:
        return "  ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

    lines = [line(COLUMNS), line(tuple("-" * w for w in widths))]
    lines.extend(line(row) for row in rows[1:])
    lines.append("")
    lines.append(summarize(results))
    return "\n".join(lines)
