import logging

import pytest

from pdfnav import config
from pdfnav.config import DEFAULT_ROOT_LOGGER_LEVEL, StdLogOutput
from pdfnav.pdf_utils.config_utils import ConfigurationError
from pdfnav.provider import NavigatorSettings


def test_empty_config():
    cli_config = config.parse_cli_config('')
    assert cli_config.navigator_settings == NavigatorSettings()
    root_config = cli_config.log_config[None]
    assert root_config.level == DEFAULT_ROOT_LOGGER_LEVEL
    assert root_config.output == StdLogOutput.STDERR


def test_read_navigator_config():
    config_string = """
    navigator:
        startxref-tail-size: 1024
        document-extension: PDF
    """
    cli_config = config.parse_cli_config(config_string)
    settings = cli_config.navigator_settings
    assert settings.startxref_tail_size == 1024
    assert settings.document_extension == 'PDF'


def test_read_logging_config():
    config_string = """
    logging:
        root-level: ERROR
        root-output: stdout
        by-module:
            pdfnav.pdf_utils.xref:
                level: DEBUG
                output: xref.log
            pdfnav.provider:
                level: 20
    """
    cli_config = config.parse_cli_config(config_string)
    assert set(cli_config.log_config.keys()) == {
        None, 'pdfnav.pdf_utils.xref', 'pdfnav.provider'
    }
    assert cli_config.log_config[None].level == 'ERROR'
    assert cli_config.log_config[None].output == StdLogOutput.STDOUT

    xref_config = cli_config.log_config['pdfnav.pdf_utils.xref']
    assert xref_config.level == 'DEBUG'
    assert xref_config.output == 'xref.log'

    provider_config = cli_config.log_config['pdfnav.provider']
    assert provider_config.level == logging.INFO
    assert provider_config.output == StdLogOutput.STDERR


@pytest.mark.parametrize('config_string', [
    """
    logging:
        root-level: [1, 2]
    """,
    """
    logging:
        root-output: 5
    """,
    """
    logging:
        by-module:
            pdfnav.provider:
                output: stdout
    """,
    """
    logging:
        by-module: [a, b]
    """,
    """
    logging:
        by-module:
            pdfnav.provider: DEBUG
    """,
    """
    logging: DEBUG
    """,
])
def test_read_bad_logging_config(config_string):
    with pytest.raises(ConfigurationError):
        config.parse_cli_config(config_string)


@pytest.mark.parametrize('config_string,err', [
    ('navigator: [1, 2]', 'requires a dictionary'),
    ('navigator:\n    startxref-tail-size: -1', 'positive integer'),
    ('navigator:\n    wrong-key: 1', 'Unexpected key'),
    ('some-other-thing: 1', 'Unexpected key'),
])
def test_read_bad_navigator_config(config_string, err):
    with pytest.raises(ConfigurationError, match=err):
        config.parse_cli_config(config_string)


def test_null_navigator_section():
    cli_config = config.parse_cli_config('navigator:\n')
    assert cli_config.navigator_settings == NavigatorSettings()
