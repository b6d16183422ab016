import logging
from typing import List, Mapping, Optional

import attr

from spark_monitoring.config import Profiles
from spark_monitoring.errors import SparkMonitoringError, TransportError
from spark_monitoring.results import Code, InterpreterResult
from spark_monitoring.router import HELP, CommandRouter, Session, parse_command

logger = logging.getLogger(__name__)

COMMANDS = [
    "help",
    "applications",
    "jobs",
    "stages",
    "executors",
    "storage/rdd",
    "logs",
    "hour",
    "day",
    "month",
    "year",
]
SERVER_UNAVAILABLE = (
    "Problem when connect to Spark Monitoring server, "
    "please check your configuration (host, port,...)"
)


@attr.s(kw_only=True)
class InterpreterContext:
    paragraph_id: Optional[str] = attr.ib(default=None)


class SparkMonitoringInterpreter:
    form_type = "simple"

    def __init__(self, properties: Mapping[str, str], router_factory=CommandRouter):
        self.properties = dict(properties)
        self.router_factory = router_factory
        self.router: Optional[CommandRouter] = None
        self.session = Session()
        self.monitoring_server_available = True

    def open(self):
        try:
            self.router = self.router_factory(Profiles.from_properties(self.properties))
        except Exception:
            self.monitoring_server_available = False
            logger.exception("Open connection to Spark Monitoring")

    def close(self):
        pass

    def interpret(self, cmd: str, context: InterpreterContext = None) -> InterpreterResult:
        logger.info(
            "Run command '%s'%s",
            cmd,
            f" for paragraph {context.paragraph_id}" if context and context.paragraph_id else "",
        )
        if self.router is None and self.monitoring_server_available:
            self.open()
        try:
            command = parse_command(cmd)
            if not self.monitoring_server_available:
                if not command.path:
                    return InterpreterResult(Code.SUCCESS)
                return InterpreterResult.text(Code.ERROR, SERVER_UNAVAILABLE)
            return self.router.route(command, self.session)
        except SparkMonitoringError as exc:
            if exc.with_help:
                return self.help(Code.ERROR, str(exc))
            logger.error("Command '%s' failed: %s", cmd, exc)
            return InterpreterResult.text(Code.ERROR, self._error_message(exc))
        except Exception as exc:
            logger.exception("Command '%s' failed", cmd)
            return InterpreterResult.text(Code.ERROR, f"Error : {exc}")

    @staticmethod
    def _error_message(exc: SparkMonitoringError) -> str:
        if isinstance(exc, TransportError):
            return f"Error : {exc}"
        return str(exc)

    def help(self, code: Code, additional_message: str = None) -> InterpreterResult:
        text = HELP + "\n"
        if additional_message is not None:
            text = additional_message + "\n" + text
        return InterpreterResult.text(code, text)

    def cancel(self, context: InterpreterContext = None):
        logger.debug("Cancel requested, requests in flight are not interrupted")

    def get_progress(self, context: InterpreterContext = None) -> int:
        return 0

    def completion(self, buf: str, cursor: int = 0) -> List[str]:
        if not buf:
            return list(COMMANDS)
        return [cmd for cmd in COMMANDS if buf in cmd.lower()]
