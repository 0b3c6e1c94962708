import asyncio
import sys
from pathlib import Path

import click

from codegateway.config.loader import find_config_file, load_config
from codegateway.engine.analyzer import Analyzer
from codegateway.errors import ConfigError
from codegateway.models.pattern import Severity, meets_severity_threshold
from codegateway.reporters import ConsoleReporter, JsonReporter, SarifReporter
from codegateway.utils.file_utils import collect_source_files

SEVERITY_CHOICES = [s.value for s in Severity]


def should_fail(results, fail_on: Severity) -> bool:
    return any(
        meets_severity_threshold(pattern.severity, fail_on)
        for result in results
        for pattern in result.patterns
    )


@click.command()
@click.argument('paths', nargs=-1, type=click.Path(exists=True, file_okay=True, dir_okay=True, readable=True))
@click.option('--severity', '-s', type=click.Choice(SEVERITY_CHOICES), help='Minimum severity to report.')
@click.option('--format', '-f', 'output_format', type=click.Choice(['console', 'json', 'sarif']), default='console', help='Output format.')
@click.option('--output', '-o', type=click.Path(), help='Output file path (json and sarif only).')
@click.option('--fail-on', type=click.Choice(SEVERITY_CHOICES), help='Exit with code 1 if a pattern at this severity is found.')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False), help='Path to a config file.')
def analyze(paths, severity, output_format, output, fail_on, config_path):
    """
    Analyze JavaScript/TypeScript files or directories for risky patterns.
    """
    paths = paths or ('.',)
    project_dir = str(Path.cwd())

    try:
        config = load_config(project_dir, config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    used_config = config_path or find_config_file(project_dir)
    if used_config and output_format == 'console':
        click.echo(f"Using config: {used_config}", err=True)

    files = collect_source_files(paths, config.exclude)
    if not files:
        click.echo("No files found to analyze")
        return

    if output_format == 'console':
        click.echo(f"Analyzing {len(files)} file(s)...", err=True)

    sources = []
    for file_path in files:
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            sources.append((str(file_path), f.read()))

    analyzer = Analyzer(config)
    results = asyncio.run(analyzer.analyze_files(
        sources,
        min_severity=Severity(severity) if severity else None,
    ))

    if output_format == 'json':
        reporter = JsonReporter(output)
    elif output_format == 'sarif':
        reporter = SarifReporter(output)
    else:
        reporter = ConsoleReporter(summary=analyzer.summarize(results))
    reporter.report(results)

    if fail_on and should_fail(results, Severity(fail_on)):
        sys.exit(1)
