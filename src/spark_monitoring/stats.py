from typing import Iterable

import attr

from spark_monitoring import render
from spark_monitoring.types import Job

RUNNING = "RUNNING"
SUCCEEDED = "SUCCEEDED"
FAILED = "FAILED"


@attr.s(kw_only=True)
class JobStatistics:
    total: int = attr.ib(default=0)
    running: int = attr.ib(default=0)
    succeeded: int = attr.ib(default=0)
    failed: int = attr.ib(default=0)

    @classmethod
    def columns(cls):
        return [
            render.Column("Total jobs", lambda s: s.total),
            render.Column("Running", lambda s: s.running),
            render.Column("Succeeded", lambda s: s.succeeded),
            render.Column("Failed", lambda s: s.failed),
        ]


def aggregate(jobs: Iterable[Job], start: int, end: int) -> JobStatistics:
    """Count jobs submitted within ``[start, end]`` (epoch millis), by status.

    Statuses other than RUNNING, SUCCEEDED and FAILED only add to the total.
    """
    stats = JobStatistics()
    for job in jobs:
        submitted = job.submissionTime
        if submitted is None or not start <= submitted <= end:
            continue
        stats.total += 1
        if job.status == RUNNING:
            stats.running += 1
        elif job.status == SUCCEEDED:
            stats.succeeded += 1
        elif job.status == FAILED:
            stats.failed += 1
    return stats


def render_statistics(stats: JobStatistics) -> str:
    return render.render_table([stats], JobStatistics.columns())
