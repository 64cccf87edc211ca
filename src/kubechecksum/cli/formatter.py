# src/kubechecksum/cli/formatter.py
import difflib
from typing import Any, Dict

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kubechecksum.stream.context import InjectionContext

# stdout carries the manifests; everything meant for humans goes to stderr
console = Console(stderr=True)


class KubeFormatter:
    """
    KubeFormatter: renders errors, diffs and the injection report.
    """

    def print_error(self, message: str):
        console.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)

    def display_diff(self, original_text: str, injected_text: str, source_name: str):
        """
        Renders a colorized unified diff between the input stream and the
        injected output.
        """
        diff = difflib.unified_diff(
            original_text.splitlines(),
            injected_text.splitlines(),
            fromfile=f"original/{source_name}",
            tofile=f"injected/{source_name}",
            lineterm=""
        )
        diff_text = "\n".join(diff)

        if not diff_text:
            console.print(f"[dim]No changes for {escape(source_name)}.[/dim]")
            return

        syntax = Syntax(diff_text, "diff", theme="monokai", background_color="default")
        console.print(Panel(syntax, title=f"Checksum Injection: {escape(source_name)}", border_style="green"))

    def print_summary_table(self, context: InjectionContext, summary: Dict[str, Any]):
        """
        One row per Deployment with the checksum keys it received.
        """
        table = Table(title="Checksum Injection Report", show_lines=True, header_style="bold magenta")
        table.add_column("Deployment", style="cyan")
        table.add_column("Checksum Keys")
        table.add_column("Values", style="dim")
        table.add_column("Result", justify="center")

        for record in context.deployments:
            keys = "\n".join(pair.key for pair in record.pairs) or "-"
            values = "\n".join(pair.value for pair in record.pairs) or "-"
            result_icon = "✅" if record.mutated else "➖"
            table.add_row(escape(record.name or "<unnamed>"), escape(keys), values, result_icon)

        console.print(table)

        for skipped in context.skipped:
            console.print(f"[yellow]Passed through {skipped.kind} '{escape(skipped.name or '<unnamed>')}':[/yellow] "
                          f"{escape(skipped.reason)}", soft_wrap=True)

        console.print(
            f"[bold white]Summary:[/bold white] {summary['documents']} document(s), "
            f"{summary['config_maps']} ConfigMap(s), {summary['secrets']} Secret(s), "
            f"{summary['mutated']}/{summary['deployments']} Deployment(s) updated ({summary['mode']} mode)"
        )
