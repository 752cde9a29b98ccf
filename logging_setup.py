"""Rich-enhanced logging setup for console output with file logging."""
import re
import sys
import time
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.table import Table
from rich.align import Align
from rich.rule import Rule
from rich import box
from rich.markup import escape

from models.pydantic_models import (
    AnalysisVerdict,
    AnalyzeResponse,
    CombinedReport,
    DiagnosticReport,
    FreeText,
    HistoryEntry,
    InjectionPoint,
    InjectionReport,
    PayloadReport,
    ProxyResponse,
    RiskLevel,
    StructuredMessage,
    VerdictLabel,
)
from tools.proxy import format_bytes

VERDICT_ICONS = {VerdictLabel.SUCCESS.value: "✅", VerdictLabel.FAILURE.value: "❌", VerdictLabel.SUSPICIOUS.value: "⚠️"}
VERDICT_DESCRIPTIONS = {
    VerdictLabel.SUCCESS.value: "Attack was successful - vulnerability confirmed",
    VerdictLabel.FAILURE.value: "Attack failed - no vulnerability detected",
    VerdictLabel.SUSPICIOUS.value: "Unusual behavior detected - requires manual review",
}
VERDICT_COLORS = {VerdictLabel.SUCCESS.value: "red", VerdictLabel.FAILURE.value: "green",
                  VerdictLabel.SUSPICIOUS.value: "yellow"}
RISK_COLORS = {RiskLevel.HIGH.value: "red", RiskLevel.MEDIUM.value: "yellow", RiskLevel.LOW.value: "green"}
STATUS_COLORS = {"success": "green", "failure": "red", "suspicious": "yellow"}


def extract_target_name(raw_request: Optional[str]) -> str:
    """Extract target name from HTTP Host header."""
    if not raw_request:
        return "session"
    host_match = re.search(r'^Host:\s*(.+)$', raw_request, re.MULTILINE | re.IGNORECASE)
    if not host_match:
        return "unknown_host"
    host = host_match.group(1).strip()
    # Clean up the host name for filename
    host = re.sub(r':\d+$', '', host)
    host = re.sub(r'[^\w\.-]', '_', host)
    return host


def setup_logging(raw_request: Optional[str] = None) -> str:
    """Set up logging to file and return the log file path."""
    logs_dir = Path(".logs")
    logs_dir.mkdir(exist_ok=True)

    target_name = extract_target_name(raw_request)
    epoch_time = int(time.time())
    log_path = logs_dir / f"{target_name}_{epoch_time}.log"

    # Clear any existing handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode='w', encoding='utf-8'),
        ]
    )

    # Suppress verbose HTTP client logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    return str(log_path)


def _truncate(text: str, limit: int = 50) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def point_columns(point: Any) -> Tuple[str, str, str, str]:
    """Name, location, risk and reason for display; non-object items show as the name."""
    if not isinstance(point, InjectionPoint):
        return str(point), "", "?", ""
    return point.name or "?", point.location or "", str(point.risk or "?"), point.reason or ""


class RichOutput:
    """Render outcomes on a Rich console while details go to the log file."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_banner(self):
        banner_text = Text()
        banner_text.append("🔐 AI HTTP Tester", style="bold blue")
        panel = Panel(
            Align.center(banner_text),
            box=box.DOUBLE,
            border_style="bright_blue",
            padding=(1, 2)
        )
        self.console.print(panel)
        self.console.print()

    def print_target_info(self, target_name: str, log_path: str):
        table = Table(show_header=False, box=box.ROUNDED, border_style="cyan")
        table.add_column("Property", style="bold cyan", width=15)
        table.add_column("Value", style="white")

        table.add_row("🎯 Target", f"[bold white]{target_name}[/bold white]")
        table.add_row("📁 Log File", f"[dim]{log_path}[/dim]")
        table.add_row("⏰ Started", f"[green]{time.strftime('%H:%M:%S')}[/green]")

        self.console.print(table)
        self.console.print()

    @contextmanager
    def scanning_phase(self, phase_name: str, description: str):
        """Context manager for phases with spinner."""
        with self.console.status(
            f"[bold blue]{phase_name}[/bold blue] - {description}",
            spinner="dots12",
            spinner_style="cyan"
        ):
            yield
        self.console.print(f"✅ [bold green]{phase_name}[/bold green] - Complete")

    def _ai_message(self, message: str, title: str = "🤖 AI"):
        self.console.print(Panel(Text(message), title=title, border_style="blue"))

    def _warn(self, message: str):
        self.console.print(Panel(f"[bold yellow]⚠️  {escape(message)}[/bold yellow]", border_style="yellow"))

    def _injection_table(self, points: List[Any]):
        table = Table(title="[bold cyan]Injection Points[/bold cyan]", box=box.ROUNDED, border_style="cyan")
        table.add_column("#", justify="right", width=3)
        table.add_column("Parameter", style="bold")
        table.add_column("Location")
        table.add_column("Risk", justify="center")
        table.add_column("Reason", style="dim")
        for idx, point in enumerate(points, start=1):
            name, location, risk, reason = point_columns(point)
            color = RISK_COLORS.get(risk.upper(), "white")
            table.add_row(str(idx), Text(name), Text(location),
                          f"[{color}]{escape(risk)}[/{color}]", Text(reason))
        self.console.print(table)

    def _payload_table(self, payloads: List[str]):
        table = Table(title="[bold magenta]Payloads[/bold magenta]", box=box.SIMPLE, border_style="magenta")
        table.add_column("#", justify="right", width=3)
        table.add_column("Payload", overflow="fold")
        for idx, payload in enumerate(payloads, start=1):
            table.add_row(str(idx), Text(_truncate(payload, 80)))
        self.console.print(table)

    def print_verdict(self, outcome: AnalysisVerdict):
        verdict = str(outcome.verdict).lower()
        color = VERDICT_COLORS.get(verdict, "white")
        icon = VERDICT_ICONS.get(verdict, "❓")
        self.console.print(Rule("[bold red]🛡️  Response Analysis[/bold red]"))
        self.console.print(Panel(
            f"[bold {color}]{icon} {escape(str(outcome.verdict).upper())}[/bold {color}]\n"
            f"[{color}]{VERDICT_DESCRIPTIONS.get(verdict, '')}[/{color}]",
            border_style=color,
            box=box.HEAVY
        ))
        details = Table(show_header=False, box=box.SIMPLE, border_style="blue")
        details.add_column("Attribute", style="bold blue", width=15)
        details.add_column("Value", style="white")
        details.add_row("🎯 Confidence", Text(f"{outcome.confidence}%"))
        self.console.print(details)
        if outcome.evidence:
            evidence_text = "\n".join(f"• {item}" for item in outcome.evidence)
            self.console.print(Panel(Text(evidence_text), title="[bold red]🔍 Evidence[/bold red]",
                                     border_style="red"))

    def print_outcome(self, response: AnalyzeResponse):
        """Render one normalized AI reply."""
        outcome = response.data
        if outcome.warning:
            self._warn(outcome.warning)

        if isinstance(outcome, FreeText):
            if outcome.parse_error:
                self.console.print(Panel(
                    f"[bold red]❌ Failed to parse AI response as JSON.[/bold red]\n\n"
                    f"[red]Error: {escape(outcome.parse_error)}[/red]\n\n{escape(outcome.hint or '')}",
                    border_style="red"
                ))
            self._ai_message(outcome.message)
            return

        if isinstance(outcome, StructuredMessage):
            self._ai_message(outcome.summary)
            return

        if outcome.explanation:
            self._ai_message(outcome.explanation)

        if isinstance(outcome, (InjectionReport, CombinedReport)):
            self._injection_table(outcome.injection_points)
        if isinstance(outcome, (PayloadReport, CombinedReport)):
            if outcome.advisory:
                self._warn(outcome.advisory)
            self._payload_table(outcome.payloads)
        if isinstance(outcome, AnalysisVerdict):
            self.print_verdict(outcome)
        self.console.print()

    def print_proxy_response(self, response: ProxyResponse):
        color = "green" if 200 <= response.status < 300 else "red" if response.status >= 400 else "yellow"
        self.console.print(Rule(f"[bold {color}]HTTP {response.status} {escape(response.status_text)}[/bold {color}]"))
        headers = Table(show_header=False, box=box.SIMPLE, border_style="dim")
        headers.add_column("Header", style="bold cyan")
        headers.add_column("Value", overflow="fold")
        for key, value in response.headers.items():
            headers.add_row(key, Text(value))
        self.console.print(headers)
        self.console.print(Panel(Text(response.body[:4000]), title="Body", border_style=color))
        self.console.print(f"[dim]⏱️ Time: {response.time}ms | 📦 Size: {format_bytes(response.size)}[/dim]")
        self.console.print()

    def print_history(self, history: List[HistoryEntry]):
        self.console.print(Rule("[bold cyan]Test History[/bold cyan]"))
        table = Table(box=box.ROUNDED, border_style="cyan")
        table.add_column("#", justify="right", width=3)
        table.add_column("Payload")
        table.add_column("Status", justify="center")
        table.add_column("Size", justify="right")
        table.add_column("Verdict")
        for entry in history:
            color = STATUS_COLORS.get(entry.status_class, "white")
            table.add_row(str(entry.index), Text(_truncate(entry.payload, 30)),
                          f"[{color}]{entry.status}[/{color}]", entry.size, Text(entry.verdict))
        self.console.print(table)
        self.console.print()

    def print_diagnostics(self, report: DiagnosticReport):
        self.console.print(Rule("[bold cyan]🔍 Ollama Diagnostics[/bold cyan]"))
        status = "[bold green]✅ running[/bold green]" if report.running else "[bold red]❌ not running[/bold red]"
        self.console.print(f"Ollama: {status} {report.version or ''}")
        if report.required:
            table = Table(box=box.ROUNDED, border_style="cyan")
            table.add_column("Model", style="bold")
            table.add_column("Purpose")
            table.add_column("VRAM", justify="right")
            table.add_column("Installed", justify="center")
            for check in report.required:
                name = check.name + (f" / {check.alt}" if check.alt else "")
                found = f"[green]✅ {check.installed}[/green]" if check.installed else "[red]❌[/red]"
                table.add_row(name, check.purpose, check.vram, found)
            self.console.print(table)
        if report.chat_model:
            state = "[green]working[/green]" if report.chat_ok else "[red]failed[/red]"
            self.console.print(f"Chat completions with {report.chat_model}: {state}")
        for error in report.errors:
            self.console.print(f"[yellow]⚠️  {escape(error)}[/yellow]")
        for check in report.missing:
            self.console.print(f"[dim]ollama pull {check.name}  # {check.purpose} ({check.vram})[/dim]")
        if report.ready:
            self.console.print(Panel("[bold green]🎉 All checks passed! Ready to use AI HTTP Tester[/bold green]",
                                     border_style="green"))
        self.console.print()

    def print_summary(self, log_path: str, elapsed: float, target_name: str):
        self.console.print(Rule("[bold green]📋 Done[/bold green]"))
        summary_table = Table(show_header=False, box=box.ROUNDED, border_style="bright_blue")
        summary_table.add_column("Metric", style="bold cyan", width=20)
        summary_table.add_column("Value", style="white")
        summary_table.add_row("🎯 Target", f"[bold]{target_name}[/bold]")
        summary_table.add_row("⏱️  Duration", f"[green]{elapsed:.1f} seconds[/green]")
        summary_table.add_row("📄 Detailed Logs", f"[dim]{log_path}[/dim]")
        self.console.print(summary_table)

    def print_error(self, error_msg: str, log_path: Optional[str] = None):
        self.console.print(Panel(
            f"[bold red]❌ FAILED[/bold red]\n\n[red]{escape(error_msg)}[/red]",
            border_style="red",
            box=box.HEAVY
        ))
        if log_path:
            self.console.print(f"[dim]📄 Check detailed logs: {log_path}[/dim]")


class BasicOutput:
    """Plain text output (``--basic``)."""

    def print_banner(self):
        print("=== AI HTTP TESTER ===")

    def print_target_info(self, target_name: str, log_path: str):
        print(f"Target: {target_name}")
        print(f"Log file: {log_path}")

    @contextmanager
    def scanning_phase(self, phase_name: str, description: str):
        print(f"{phase_name}: {description}")
        yield
        print("✓ Complete")

    def print_verdict(self, outcome: AnalysisVerdict):
        print(f"Verdict: {str(outcome.verdict).upper()} ({outcome.confidence}% confidence)")
        for item in outcome.evidence:
            print(f"  - {item}")

    def print_outcome(self, response: AnalyzeResponse):
        outcome = response.data
        if outcome.warning:
            print(f"WARNING: {outcome.warning}")
        if isinstance(outcome, FreeText):
            if outcome.parse_error:
                print(f"Failed to parse AI response as JSON. Error: {outcome.parse_error}")
            print(outcome.message)
            return
        if isinstance(outcome, StructuredMessage):
            print(outcome.summary)
            return
        if outcome.explanation:
            print(outcome.explanation)
        if isinstance(outcome, (InjectionReport, CombinedReport)):
            for idx, point in enumerate(outcome.injection_points, start=1):
                name, location, risk, reason = point_columns(point)
                print(f"{idx}. {name} ({location}) - {risk} risk: {reason}")
        if isinstance(outcome, (PayloadReport, CombinedReport)):
            if outcome.advisory:
                print(f"NOTE: {outcome.advisory}")
            for idx, payload in enumerate(outcome.payloads, start=1):
                print(f"{idx}. {payload}")
        if isinstance(outcome, AnalysisVerdict):
            self.print_verdict(outcome)

    def print_proxy_response(self, response: ProxyResponse):
        print(f"HTTP/1.1 {response.status} {response.status_text}")
        for key, value in response.headers.items():
            print(f"{key}: {value}")
        print()
        print(response.body)
        print(f"--- Time: {response.time}ms | Size: {format_bytes(response.size)}")

    def print_history(self, history: List[HistoryEntry]):
        print("Test History:")
        for entry in history:
            print(f"  {entry.index}. {_truncate(entry.payload, 30)} | {entry.status} | {entry.size} | {entry.verdict}")

    def print_diagnostics(self, report: DiagnosticReport):
        print(f"Ollama running: {report.running} {report.version or ''}")
        for check in report.required:
            print(f"  {check.name}: {'installed' if check.installed else 'missing'} ({check.purpose})")
        for error in report.errors:
            print(f"  ! {error}")
        print("Ready" if report.ready else "Not ready")

    def print_summary(self, log_path: str, elapsed: float, target_name: str):
        print(f"Done in {elapsed:.1f} seconds")
        print(f"Log file: {log_path}")

    def print_error(self, error_msg: str, log_path: Optional[str] = None):
        print(f"ERROR: {error_msg}")
        if log_path:
            print(f"Check logs: {log_path}")


class QuietOutput:
    """No console output (``--quiet``); errors still reach stderr."""

    @contextmanager
    def scanning_phase(self, phase_name: str, description: str):
        yield

    def __getattr__(self, name: str):
        if name.startswith("print_"):
            return lambda *args, **kwargs: None
        raise AttributeError(name)

    def print_error(self, error_msg: str, log_path: Optional[str] = None):
        print(f"[ERROR] {error_msg}", file=sys.stderr)
