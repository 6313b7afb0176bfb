"""提供 tagrefl 测试的公共 Fixtures."""

import logging
from collections.abc import Generator

import pytest
from click.testing import CliRunner

from tagrefl.log import logger


@pytest.fixture
def runner() -> CliRunner:
    """提供 Click CLI 测试运行器.

    Returns:
        CliRunner 实例.
    """
    return CliRunner()


@pytest.fixture
def restore_logger() -> Generator[None, None, None]:
    """测试结束后恢复 tagrefl logger 的 Handler 与级别."""
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def debug_log(
    caplog: pytest.LogCaptureFixture,
) -> Generator[pytest.LogCaptureFixture, None, None]:
    """在 DEBUG 级别捕获 tagrefl 日志."""
    with caplog.at_level(logging.DEBUG, logger="tagrefl"):
        yield caplog
