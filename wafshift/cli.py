"""Typer CLI — headless commands for wafshift."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wafshift import __version__
from wafshift.config import Settings
from wafshift.errors import ConfigurationError, NetworkError
from wafshift.models.types import AttackType, EvasionLevel, PayloadMethod, TechniqueId

app = typer.Typer(
    name="wafshift",
    help="wafshift — adaptive WAF evasion payload generator",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool = False, config_level: str | None = None) -> None:
    if verbose:
        level = logging.DEBUG
    elif config_level:
        level = getattr(logging, config_level.upper(), logging.INFO)
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _printable(text: str) -> str:
    """Escape lone surrogates so undecodable argv bytes can be printed."""
    return text.encode("utf-8", errors="backslashreplace").decode("utf-8")


def _fail(exc: Exception) -> typer.Exit:
    """Print an error and map it to the process exit code."""
    console.print(f"[red]Error:[/] {exc}")
    if isinstance(exc, ConfigurationError):
        return typer.Exit(2)
    return typer.Exit(1)


@app.command()
def generate(
    payloads: list[str] | None = typer.Argument(None, help="Payload(s) to obfuscate"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read payloads from file"),
    attack: str | None = typer.Option(
        None, "--attack", "-a", help="Attack type (xss, sqli, path, ...); detected when omitted",
    ),
    level: str | None = typer.Option(None, "--level", "-l", help="basic, medium or advanced"),
    method: str | None = typer.Option(
        None, "--method", "-m", help="auto, encodings, paths or commands",
    ),
    techniques: str | None = typer.Option(
        None, "--techniques", "-t", help="Comma-separated techniques, overrides selection",
    ),
    url: str | None = typer.Option(None, "--url", "-u", help="Target URL"),
    fingerprint: bool = typer.Option(
        False, "--fingerprint", help="Fingerprint the target WAF and adapt techniques",
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
    max_variants: int | None = typer.Option(
        None, "--max-variants", help="Cap variants per payload (0 = unlimited)",
    ),
    show: bool = typer.Option(False, "--show", help="Print variants to the console"),
    config: str | None = typer.Option(None, help="Path to config YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Generate evasion variants for one or more payloads."""
    from wafshift.core.engine import EvasionEngine
    from wafshift.output.writer import PayloadFileWriter

    try:
        settings = Settings.load(config)
        _setup_logging(verbose, config_level=settings.log_level)

        gen = settings.generation
        if attack:
            gen.attack_type = AttackType.parse(attack)
        if level:
            gen.evasion_level = EvasionLevel.parse(level, strict=True)
        if method:
            try:
                gen.payload_method = PayloadMethod(method.lower())
            except ValueError:
                raise ConfigurationError(f"unknown payload method: {method!r}") from None
        if file:
            gen.payload_file = file
        if max_variants is not None:
            gen.max_variants = max(0, max_variants)
        if url:
            settings.target.url = url
        if output:
            settings.output.directory = output
        selected = [TechniqueId.parse(t) for t in _split(techniques)] or None

        engine = EvasionEngine(settings)

        async def _run():
            items = list(payloads) if payloads else await engine.load_payloads()
            if selected is None:
                report = await engine.run(items, fingerprint=fingerprint)
            else:
                target = settings.target.url
                detect_waf = fingerprint or settings.target.fingerprint
                waf = await engine.fingerprint(target) if detect_waf and target else None
                report = engine.generate(
                    items, gen.attack_type, gen.evasion_level, selected, fingerprint=waf,
                )
            paths = await PayloadFileWriter.from_settings(settings.output).write(report)
            return report, paths

        console.print(
            f"[bold blue]wafshift v{__version__}[/] — level "
            f"[bold]{gen.evasion_level.label}[/]"
        )
        report, paths = asyncio.run(_run())
    except (ConfigurationError, NetworkError, OSError, UnicodeError) as exc:
        raise _fail(exc) from exc

    if report.fingerprint is not None:
        fp = report.fingerprint
        console.print(f"  WAF: [bold]{fp.waf_type}[/] ({fp.confidence:.0%} confidence)")

    table = Table(title="Generated Variants")
    table.add_column("Payload", style="cyan", overflow="fold")
    table.add_column("Attack Type", style="green")
    table.add_column("Technique", style="yellow")
    table.add_column("Variants", justify="right")
    for record in report.payload_results:
        table.add_row(
            escape(_printable(record.original_payload[:60])),
            record.attack_type.value,
            record.technique.value,
            str(len(record.variants)),
        )
    console.print(table)

    if show:
        for record in report.payload_results:
            payload = escape(_printable(record.original_payload))
            console.print(f"\n[bold]{record.technique}[/] [dim]{payload}[/]")
            for variant in record.variants:
                console.print(_printable(variant), markup=False, highlight=False)

    for failure in report.failures:
        reason = escape(_printable(failure.reason))
        console.print(f"  [yellow]Skipped[/] {failure.technique}: {reason}")

    console.print(
        f"\n[bold green]Done![/] {report.total_variants} variants "
        f"for {len(report.results)} payloads"
    )
    for path in paths:
        console.print(f"  - {path}")


@app.command(name="fingerprint")
def fingerprint_cmd(
    url: str = typer.Argument(help="Target URL"),
    report: bool = typer.Option(False, "--report", help="Print the full WAF analysis report"),
    config: str | None = typer.Option(None, help="Path to config YAML"),
    verbose: bool = typer.Option(False, "-v", "--verbose"),
):
    """Identify the WAF in front of a URL."""
    from wafshift.core.engine import EvasionEngine
    from wafshift.fingerprint.report import generate_waf_report

    try:
        settings = Settings.load(config)
        _setup_logging(verbose, config_level=settings.log_level)
        result = asyncio.run(EvasionEngine(settings).fingerprint(url))
    except (ConfigurationError, NetworkError) as exc:
        raise _fail(exc) from exc

    if report:
        console.print(generate_waf_report(result), markup=False, highlight=False)
        return

    color = "green" if result.detected else "yellow"
    console.print(
        f"[bold {color}]{result.waf_type}[/] ({result.confidence:.0%} confidence)"
    )
    for line in result.evidence:
        console.print(f"  • {line}", markup=False)


@app.command(name="techniques")
def list_techniques(
    attack: str | None = typer.Option(None, "--attack", "-a", help="Filter by attack type"),
):
    """List techniques and the attack types they apply to."""
    from wafshift.core.registry import DEFAULT_REGISTRY
    from wafshift.evasions import TECHNIQUES

    try:
        attack_types = [AttackType.parse(attack)] if attack else DEFAULT_REGISTRY.attack_types
    except ConfigurationError as exc:
        raise _fail(exc) from exc

    table = Table(title="Attack Types")
    table.add_column("Attack Type", style="cyan")
    table.add_column("Techniques")
    for attack_type in attack_types:
        techniques = DEFAULT_REGISTRY.techniques_or_fallback(attack_type)
        table.add_row(attack_type.value, ", ".join(t.value for t in techniques))
    console.print(table)

    table = Table(title="Techniques")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Deterministic", style="yellow")
    table.add_column("Description")
    for technique in TECHNIQUES.values():
        table.add_row(
            technique.id.value,
            technique.category.value,
            "yes" if technique.deterministic else "no",
            technique.description,
        )
    console.print(table)


@app.command()
def detect(payload: str = typer.Argument(help="Payload to classify")):
    """Guess the attack type of a payload."""
    from wafshift.utils.payloads import detect_attack_type

    console.print(detect_attack_type(payload).value)


@app.command()
def version():
    """Show version."""
    console.print(f"wafshift v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
