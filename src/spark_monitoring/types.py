import abc
from typing import Any, Dict, List, Optional

import attr

from spark_monitoring import render
from spark_monitoring.time_tools import (
    format_display,
    parse_display,
    parse_source_timestamp,
)


def lenient(foo):
    """Wrap a converter so that ``None`` and unparsable values become ``None``."""

    def inner(arg):
        if arg is None:
            return None
        try:
            return foo(arg)
        except (TypeError, ValueError):
            return None

    return inner


def to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def to_display(value) -> Optional[str]:
    """Display form of a server timestamp, display formatted input is kept."""
    millis = parse_source_timestamp(value)
    if millis is None:
        millis = parse_display(value)
    return format_display(millis)


def source_to_millis(value) -> Optional[int]:
    if isinstance(value, int):
        return value
    return parse_source_timestamp(value)


@attr.s(frozen=True, kw_only=True)
class ConnectionProfile:
    name: str = attr.ib()
    host: str = attr.ib()
    port: int = attr.ib(converter=int)
    timeout: Optional[float] = attr.ib(default=None)


class Node:
    """A record materialized from the server's key/value stream.

    ``leading_key`` starts a new record, ``trailing_key`` completes it.
    """

    leading_key: str = None
    trailing_key: str = None

    @classmethod
    def field_map(cls) -> Dict[str, str]:
        return {f.name.lower(): f.name for f in attr.fields(cls)}

    @classmethod
    def create_from_dict(cls, data: Dict[str, Any]):
        if issubclass(data.__class__, Node):
            return data
        assert isinstance(data, dict), type(data)
        field_names = {f.name for f in attr.fields(cls)}
        kwargs = {x: data[x] for x in field_names & set(data.keys())}
        return cls(**kwargs)

    @classmethod
    @abc.abstractmethod
    def columns(cls) -> List[render.Column]:
        pass

    @property
    def fields(self) -> Dict[str, Any]:
        return self._to_dict()

    def _to_dict(self):
        attr_names = [x.name for x in attr.fields(self.__class__)]
        return dict(zip(attr_names, [getattr(self, x) for x in attr_names]))


@attr.s(kw_only=True)
class Application(Node):
    leading_key = "id"
    trailing_key = "completed"

    id: str = attr.ib(default=None)
    name: str = attr.ib(default=None)
    startTime: Optional[str] = attr.ib(converter=lenient(to_display), default=None)
    endTime: Optional[str] = attr.ib(converter=lenient(to_display), default=None)
    sparkUser: Optional[str] = attr.ib(default=None)
    completed: bool = attr.ib(converter=to_bool, default=False)

    def duration(self) -> Optional[float]:
        """Seconds between start and end, ``None`` while the application runs."""
        if not self.completed:
            return None
        start = parse_display(self.startTime) or 0
        end = parse_display(self.endTime) or 0
        return (end - start) / 1000

    @classmethod
    def columns(cls):
        return [
            render.Column("Id", lambda a: a.id),
            render.Column("Name", lambda a: a.name),
            render.Column("Start Time", lambda a: a.startTime),
            render.Column("Duration", lambda a: a.duration(), render.format_seconds),
            render.Column("Completed", lambda a: a.completed, render.format_bool),
        ]


@attr.s(kw_only=True)
class Job(Node):
    leading_key = "jobId"
    trailing_key = "numFailedTasks"

    jobId: str = attr.ib(default=None)
    name: str = attr.ib(default=None)
    description: Optional[str] = attr.ib(default=None)
    submissionTime: Optional[int] = attr.ib(converter=lenient(source_to_millis), default=None)
    completionTime: Optional[int] = attr.ib(converter=lenient(source_to_millis), default=None)
    status: Optional[str] = attr.ib(default=None)
    numTasks: Optional[int] = attr.ib(converter=lenient(int), default=None)
    numCompletedTasks: Optional[int] = attr.ib(converter=lenient(int), default=None)
    numFailedTasks: Optional[int] = attr.ib(converter=lenient(int), default=None)

    @property
    def display_name(self) -> str:
        if self.description:
            return f"{self.description}: {self.name}"
        return self.name

    def duration(self) -> Optional[float]:
        if self.submissionTime is None or self.completionTime is None:
            return None
        return (self.completionTime - self.submissionTime) / 1000

    @classmethod
    def columns(cls):
        return [
            render.Column("Id", lambda j: j.jobId),
            render.Column("Name", lambda j: j.display_name),
            render.Column("Submission Time", lambda j: format_display(j.submissionTime)),
            render.Column("Completion Time", lambda j: format_display(j.completionTime)),
            render.Column("Duration", lambda j: j.duration(), render.format_seconds),
            render.Column("Status", lambda j: j.status),
            render.Column("Num Tasks", lambda j: j.numTasks),
            render.Column(
                "Num Completed",
                lambda j: (j.numCompletedTasks, j.numTasks),
                render.format_ratio,
            ),
            render.Column(
                "Num Failed",
                lambda j: (j.numFailedTasks, j.numTasks),
                render.format_ratio,
            ),
        ]


@attr.s(kw_only=True)
class Stage(Node):
    leading_key = "status"
    trailing_key = "details"

    status: str = attr.ib(default=None)
    stageId: str = attr.ib(default=None)
    name: str = attr.ib(default=None)
    numCompleteTasks: Optional[int] = attr.ib(converter=lenient(int), default=None)
    numFailedTasks: Optional[int] = attr.ib(converter=lenient(int), default=None)
    inputBytes: Optional[int] = attr.ib(converter=lenient(int), default=None)
    inputRecords: Optional[int] = attr.ib(converter=lenient(int), default=None)
    outputBytes: Optional[int] = attr.ib(converter=lenient(int), default=None)
    outputRecords: Optional[int] = attr.ib(converter=lenient(int), default=None)
    details: Optional[str] = attr.ib(default=None)

    @property
    def total_tasks(self) -> int:
        return (self.numCompleteTasks or 0) + (self.numFailedTasks or 0)

    @classmethod
    def columns(cls):
        return [
            render.Column("Id", lambda s: s.stageId),
            render.Column("Name", lambda s: s.name),
            render.Column("Status", lambda s: s.status),
            render.Column(
                "Completed Tasks",
                lambda s: (s.numCompleteTasks or 0, s.total_tasks),
                render.format_ratio,
            ),
            render.Column(
                "Failed Tasks",
                lambda s: (s.numFailedTasks or 0, s.total_tasks),
                render.format_ratio,
            ),
            render.Column(
                "InputBytes/InputRecords",
                lambda s: (s.inputBytes, s.inputRecords),
                render.format_bytes_records,
            ),
            render.Column(
                "OutputBytes/OutputRecords",
                lambda s: (s.outputBytes, s.outputRecords),
                render.format_bytes_records,
            ),
            render.Column("Details", lambda s: s.details),
        ]
