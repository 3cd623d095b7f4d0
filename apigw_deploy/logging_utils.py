import logging
import os
import sys


_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class WorkflowCommandFormatter(logging.Formatter):
    """GitHub Actions 러너가 annotation 으로 인식하는 ::level:: 형식으로 출력한다."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _COMMANDS.get(record.levelno)
        if command is None:
            return message
        # 워크플로 커맨드는 한 줄이어야 하므로 개행을 인코딩한다.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{escaped}"


def running_in_actions() -> bool:
    return os.getenv("GITHUB_ACTIONS", "").lower() == "true"


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity >= 1 or os.getenv("RUNNER_DEBUG") == "1":
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stdout)
    if running_in_actions():
        handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )

    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
