import logging

from html_extractor.logger import get_module_logger, setup_logger


def test_level_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("HTML_EXTRACTOR_LOG_LEVEL", "warning")

    logger = setup_logger("html_extractor_env_level_test")

    assert logger.level == logging.WARNING


def test_repeat_setup_changes_level_only():
    logger = setup_logger("html_extractor_relevel_test", level="INFO")
    handlers = list(logger.handlers)

    setup_logger("html_extractor_relevel_test", level=logging.DEBUG)

    assert logger.level == logging.DEBUG
    assert logger.handlers == handlers


def test_unknown_level_name_falls_back_to_info():
    assert setup_logger("html_extractor_bad_level_test", level="LOUD").level == logging.INFO


def test_module_logger_is_a_child_of_the_package_logger():
    assert get_module_logger("grammar").name == "html_extractor.grammar"
