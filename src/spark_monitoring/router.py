import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

import attr

from spark_monitoring import render
from spark_monitoring.config import DEFAULT_PROFILE, Profiles
from spark_monitoring.errors import MalformedCommand, UnknownCommand, UpstreamUnavailable
from spark_monitoring.loaders.clients import MetricsClient
from spark_monitoring.results import Code, InterpreterResult
from spark_monitoring.stats import aggregate, render_statistics
from spark_monitoring.time_tools import STAT_BUCKETS, resolve_bucket
from spark_monitoring.types import Application, ConnectionProfile, Job, Stage

logger = logging.getLogger(__name__)

HELP = (
    "Spark Monitoring interpreter:\n"
    "General format (in REST api): [(profile)] /<object>/<object_id>\n"
    "  - profile: name of a configured connection, 'default' when omitted\n"
    "  - object: types of objects such as: applications, jobs, stages\n"
    "  - object_id: id of the object to view\n"
    "Commands (example):\n"
    "  - /applications: list all applications\n"
    "  - /applications/<application_id>: show one application\n"
    "  - /jobs: list all jobs of the current application\n"
    "  - /jobs/<job_id>: show one job of the current application\n"
    "  - /jobs/<hour|day|month|year>[/<from>[/<to>]]: count jobs by status\n"
    "  - /stages: list all stages of the current application\n"
)
WRONG_URL = "Wrong REST url! See help to correct it."
UNKNOWN_URL = "Unknown REST url"
NO_APPLICATION = "Error get data from server"


def parse_profile(text: str) -> str:
    """Profile named by a leading ``(name)``, or the default profile."""
    if not text.startswith("("):
        return DEFAULT_PROFILE
    end = text.find(")")
    if end == -1:
        raise MalformedCommand(f"Missing ')' after profile in '{text}'")
    return text[1:end]


def strip_prefix(text: str, profile: str) -> str:
    if profile == DEFAULT_PROFILE:
        return text
    return text[len(profile) + 2 :]


@attr.s(frozen=True, kw_only=True)
class Command:
    profile: str = attr.ib()
    path: str = attr.ib()

    @property
    def segments(self) -> List[str]:
        return [s for s in self.path.split("/") if s]

    @property
    def resource(self) -> Optional[str]:
        segments = self.segments
        return segments[0].partition("?")[0].lower() if segments else None


def parse_command(text: str) -> Command:
    profile = parse_profile(text)
    return Command(profile=profile, path=strip_prefix(text, profile).strip())


@attr.s(kw_only=True)
class Session:
    """State kept between commands of one interpreter.

    Holds the last application listed per profile, which ``jobs`` and
    ``stages`` use when no application id is given. Entries are replaced by
    newer listings and never expire. Commands are expected one at a time, the
    mapping is not locked.
    """

    applications: Dict[str, Application] = attr.ib(factory=dict)

    def current_application(self, profile: str) -> Optional[Application]:
        return self.applications.get(profile)

    def remember(self, profile: str, application: Application):
        self.applications[profile] = application


class CommandRouter:
    def __init__(
        self,
        profiles: Profiles,
        client_factory: Callable[[ConnectionProfile], MetricsClient] = MetricsClient,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.profiles = profiles
        self.client_factory = client_factory
        self.clock = clock

    def route(self, command: Command, session: Session) -> InterpreterResult:
        path = command.path
        if not path:
            return InterpreterResult(Code.SUCCESS)
        if path.startswith("/help"):
            return InterpreterResult.text(Code.SUCCESS, HELP)
        if not path.startswith("/"):
            raise MalformedCommand(WRONG_URL)

        resource = command.resource
        handler = {
            "applications": self.applications,
            "jobs": self.jobs,
            "stages": self.stages,
        }.get(resource)
        if handler is None:
            raise UnknownCommand(UNKNOWN_URL)

        logger.info("Run Spark Monitoring REST url '%s' on profile %s", path, command.profile)
        client = self.client_factory(self.profiles.lookup(command.profile))
        return InterpreterResult.table(handler(command, session, client))

    def applications(self, command: Command, session: Session, client: MetricsClient) -> str:
        applications = self._fetch_applications(command.profile, command.path, session, client)
        return render.render_table(applications, Application.columns())

    def jobs(self, command: Command, session: Session, client: MetricsClient) -> str:
        app_id = self._application_id(command.profile, session, client)
        segments = command.segments
        if len(segments) >= 2 and segments[1].lower() in STAT_BUCKETS:
            jobs = client.get_node_metrics("jobs", f"/applications/{app_id}/jobs/")
            start, end = resolve_bucket(segments[1], *segments[2:4], now=self.clock())
            logger.info("Job statistics between %s and %s", start, end)
            return render_statistics(aggregate(jobs, start, end))

        jobs = client.get_node_metrics("jobs", f"/applications/{app_id}{command.path}")
        return render.render_table(jobs, Job.columns())

    def stages(self, command: Command, session: Session, client: MetricsClient) -> str:
        app_id = self._application_id(command.profile, session, client)
        stages = client.get_node_metrics("stages", f"/applications/{app_id}{command.path}")
        return render.render_table(stages, Stage.columns())

    def _fetch_applications(self, profile, path, session, client) -> List[Application]:
        applications = client.get_node_metrics("applications", path)
        if applications:
            session.remember(profile, applications[-1])
        return applications

    def _application_id(self, profile, session, client) -> str:
        application = session.current_application(profile)
        if application is None:
            self._fetch_applications(profile, "/applications", session, client)
            application = session.current_application(profile)
        if application is None:
            raise UpstreamUnavailable(NO_APPLICATION)
        return application.id
