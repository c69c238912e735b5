import logging
import sys
from contextlib import contextmanager
from typing import Optional, Tuple

import click

from pdfnav import __version__
from pdfnav.config import (
    CLIConfig,
    LogConfig,
    StdLogOutput,
    parse_cli_config,
    parse_logging_config,
)
from pdfnav.document import Position, TextDocument
from pdfnav.pdf_utils import misc
from pdfnav.pdf_utils.config_utils import ConfigurationError
from pdfnav.pdf_utils.xref import (
    XRefType,
    locate_xref_section,
    parse_xref_table,
)
from pdfnav.provider import NavigatorSettings, PdfDefinitionProvider

__all__ = ['cli']

logger = logging.getLogger(__name__)


class NoStackTraceFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return ""


LOG_FORMAT_STRING = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def logging_setup(log_configs, verbose: bool):
    log_config: LogConfig
    for module, log_config in log_configs.items():
        cur_logger = logging.getLogger(module)
        cur_logger.setLevel(log_config.level)
        if isinstance(log_config.output, StdLogOutput):
            if log_config.output == StdLogOutput.STDOUT:
                handler = logging.StreamHandler(sys.stdout)
            else:
                handler = logging.StreamHandler()
            # when logging to the console, don't output stack traces
            # unless in verbose mode
            if verbose:
                formatter = logging.Formatter(LOG_FORMAT_STRING)
            else:
                formatter = NoStackTraceFormatter(LOG_FORMAT_STRING)
        else:
            handler = logging.FileHandler(log_config.output)
            formatter = logging.Formatter(LOG_FORMAT_STRING)
        handler.setFormatter(formatter)
        cur_logger.addHandler(handler)


@contextmanager
def pdfnav_exception_manager():
    msg = exception = None
    try:
        yield
    except click.ClickException:
        raise
    except misc.PdfReadError as e:
        exception = e
        msg = f"Failed to read PDF file: {e.msg}"
    except ConfigurationError as e:
        exception = e
        msg = f"Configuration problem: {e}"
    except Exception as e:
        exception = e
        msg = "Generic processing error."

    if exception is not None:
        logger.error(msg, exc_info=exception)
        raise click.ClickException(msg)


DEFAULT_CONFIG_FILE = 'pdfnav.yml'

readable_file = click.Path(exists=True, readable=True, dir_okay=False)


def _load_config(config) -> Tuple[Optional[str], CLIConfig]:
    # an explicit --config file must be readable, pdfnav.yml may be absent
    if config is None:
        source = DEFAULT_CONFIG_FILE
        try:
            with open(DEFAULT_CONFIG_FILE, 'r') as f:
                config_text = f.read()
        except FileNotFoundError:
            return None, CLIConfig(
                navigator_settings=NavigatorSettings(),
                log_config=parse_logging_config({})
            )
        except IOError as e:
            raise click.ClickException(
                f"Failed to read {DEFAULT_CONFIG_FILE}: {e}"
            )
    else:
        source = config.name
        try:
            config_text = config.read()
        except IOError as e:
            raise click.ClickException(f"Failed to read configuration: {e}")
    try:
        return source, parse_cli_config(config_text)
    except ConfigurationError as e:
        raise click.ClickException(f"Configuration problem: {e}")


@click.group()
@click.version_option(prog_name='pdfnav', version=__version__)
@click.option('--config',
              help=(
                  'YAML file to load configuration from'
                  f'[default: {DEFAULT_CONFIG_FILE}]'
              ), required=False, type=click.File('r'))
@click.option('--verbose', help='Run in verbose mode', required=False,
              default=False, type=bool, is_flag=True)
@click.pass_context
def cli(ctx, config, verbose):
    source, cfg = _load_config(config)
    ctx.ensure_object(dict)
    ctx.obj['settings'] = cfg.navigator_settings

    log_config = cfg.log_config
    if verbose:
        # only the level of the root logger changes, not where it logs to
        log_config[None] = LogConfig(
            level=logging.DEBUG, output=log_config[None].output
        )
    logging_setup(log_config, verbose)

    if verbose:
        logging.debug("Running with --verbose")
    if source is not None:
        logging.debug(f'Finished reading configuration from {source}.')
    else:
        logging.debug('There was no configuration to parse.')


@cli.command(help='list the cross-reference table of a PDF file', name='xref')
@click.argument('infile', type=readable_file)
@click.pass_context
def list_xref(ctx, infile):
    settings: NavigatorSettings = ctx.obj['settings']
    with pdfnav_exception_manager():
        document = TextDocument.from_file(infile)
        table = parse_xref_table(
            locate_xref_section(
                document.text, settings.startxref_tail_size
            )
        )
        for entry in table:
            marker = 'f' if entry.xref_type == XRefType.FREE else 'n'
            click.echo(
                f"{entry.idnum} {entry.generation} {entry.location} {marker}"
            )


@cli.command(help='find the definition of the object referenced at a '
                  'given line and column (both starting at 1)',
             name='resolve')
@click.argument('infile', type=readable_file)
@click.argument('line', type=click.IntRange(min=1))
@click.argument('column', type=click.IntRange(min=1))
@click.pass_context
def resolve(ctx, infile, line, column):
    settings: NavigatorSettings = ctx.obj['settings']
    with pdfnav_exception_manager():
        document = TextDocument.from_file(infile)
        provider = PdfDefinitionProvider(settings)
        if not provider.accepts(document):
            logger.warning(
                f"{infile} does not have the extension "
                f"'.{settings.document_extension}', not parsing it"
            )
        provider.on_active_document_changed(document)
        location = provider.provide_definition(
            document, Position(line - 1, column - 1)
        )
    if location is None:
        click.echo("No definition available.")
        ctx.exit(1)
    target = location.position
    click.echo(
        f"{location.document_id}:{target.line + 1}:{target.column + 1}"
    )
