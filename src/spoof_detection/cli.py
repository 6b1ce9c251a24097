# src/spoof_detection/cli.py

import json
import sys
from typing import Optional

import click

from .config import configure_logging, load_settings
from .detector import Detector
from .errors import ParseError, ResolverInitError
from .models import AnalysisResult, DomainReport
from .protocol_checks import DnsRecordFetcher


def format_domain_report(report: DomainReport) -> str:
    lines = [
        f"Domain analysis for: {report.domain}",
        f"  Exists: {report.exists}",
        f"  SPF: strict_all={report.spf.has_strict_all}, soft_all={report.spf.has_soft_all}",
        f"  DMARC record: {report.dmarc or 'None'}",
        f"  DKIM record: {report.dkim}",
        f"  Verdict: {report.verdict.value}",
    ]
    return "\n".join(lines)


def format_analysis(result: AnalysisResult) -> str:
    ev = result.evidence
    lines = [
        f"Verdict: {result.verdict.value}",
        "Evidence:",
        f"  From domain: {ev.from_domain or 'None'}",
        f"  Domain valid: {ev.domain_valid}",
        f"  SPF policy: {ev.spf_policy or 'None'}",
        f"  DMARC policy: {ev.dmarc_policy or 'None'}",
        f"  DKIM present: {ev.dkim_present}",
        f"  Alignment OK: {ev.alignment_ok}",
    ]
    return "\n".join(lines)


@click.command()
@click.option('-i', '--input', 'input_path', type=click.Path(dir_okay=False),
              help='Path to a .eml file')
@click.option('-d', '--domain', help='Domain to analyze (with --input: overrides the From domain)')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging on stderr')
def main(input_path: Optional[str], domain: Optional[str], output_json: bool, verbose: bool):
    """Assess whether a message or a sending domain is likely spoofed.

    Examples:

        spoof-detect --domain example.com

        spoof-detect --input message.eml --json

        spoof-detect --input message.eml --domain example.org
    """
    if not input_path and not domain:
        click.echo("Error: You must provide either --input <file> or --domain <domain>.", err=True)
        sys.exit(1)

    settings = load_settings()
    configure_logging("DEBUG" if verbose else "WARNING")

    try:
        detector = Detector(DnsRecordFetcher(settings))
    except ResolverInitError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not input_path:
        report = detector.analyze_domain(domain.strip())
        if output_json:
            click.echo(json.dumps(report.to_dict(), indent=2))
        else:
            click.echo(format_domain_report(report))
        return

    try:
        with open(input_path, "rb") as f:
            raw = f.read()
    except OSError as e:
        click.echo(f"Error: cannot read {input_path}: {e}", err=True)
        sys.exit(1)

    try:
        result = detector.analyze_raw(raw, from_override=domain)
    except ParseError as e:
        click.echo(f"Error: failed to parse email: {e}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_analysis(result))


if __name__ == '__main__':
    main()
