import json

from pythonjsonlogger.json import JsonFormatter

from Staffluent.app.logging_config import setup_logging


def test_setup_logging_emits_json(capsys):
    logger = setup_logging('INFO')

    assert isinstance(logger.handlers[0].formatter, JsonFormatter)
    assert logger.propagate is False

    logger.getChild('knowledge_base').info('Search for %r returned %d results', 'shifts', 2)

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line['levelname'] == 'INFO'
    assert line['name'] == 'Staffluent.knowledge_base'
    assert line['message'] == "Search for 'shifts' returned 2 results"
