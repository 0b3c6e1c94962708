import click

from codegateway import __version__
from codegateway.utils.logging import setup_logging

from .commands.analyze import analyze
from .commands.init import init


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging to stderr.')
@click.option('--json-logs', is_flag=True, help='Emit logs as JSON lines.')
@click.version_option(version=__version__)
def main(verbose, json_logs):
    """
    CodeGateway: detect risky patterns in JavaScript and TypeScript code.
    """
    setup_logging("DEBUG" if verbose else "WARNING", json_logs=json_logs)


main.add_command(analyze)
main.add_command(init)

if __name__ == '__main__':
    main()
