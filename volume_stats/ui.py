from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from volume_stats.models import VolumeStatsReport


def _format_bytes(value: int) -> str:
    if value < 1024:
        return f"{value} B"
    size = float(value)
    for unit in ('KiB', 'MiB', 'GiB', 'TiB'):
        size /= 1024
        if size < 1024 or unit == 'TiB':
            break
    return f"{size:.1f} {unit}"


class VolumeStatsUI:
    def __init__(self, console: Console):
        self.console = console

    def display_results(self, report: VolumeStatsReport, namespace: str, label_selector: str):
        """Displays a table of broker volume usage, sorted by broker id."""
        table = Table(title=f"Broker volumes in {namespace} ({label_selector or 'all pods'})")
        table.add_column("Broker", justify="right", style="cyan")
        table.add_column("Pod", style="green")
        table.add_column("Node")
        table.add_column("PVC")
        table.add_column("Capacity", justify="right")
        table.add_column("Available", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Used %", justify="right")

        for result in sorted(report.results, key=lambda r: (r.broker_id, r.pod)):
            ratio = result.used_ratio
            style = "red" if ratio >= 0.9 else "yellow" if ratio >= 0.75 else None
            table.add_row(
                str(result.broker_id),
                result.pod,
                result.node,
                result.persistent_volume_claim,
                _format_bytes(result.capacity_bytes),
                _format_bytes(result.available_bytes),
                _format_bytes(result.used_bytes),
                f"{ratio * 100:.1f}%",
                style=style,
            )
        self.console.print(table)

        if report.skipped:
            self.display_skipped(report)

    def display_skipped(self, report: VolumeStatsReport):
        lines: List[str] = [
            f"[bold]{s.pod}[/bold] ({s.node or 'unscheduled'}): [yellow]{s.reason}[/yellow] {s.error}"
            for s in report.skipped
        ]
        self.console.print(Panel(
            "\n".join(lines),
            title=f"[bold yellow]Skipped pods ({len(report.skipped)})",
            border_style="yellow",
        ))

    def display_error_panel(self, message: str, title: str = "[bold red]ERROR"):
        self.console.print(Panel(f"[bold red]{message}[/bold red]", title=title, border_style="red"))
