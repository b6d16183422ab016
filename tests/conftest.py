from datetime import datetime

import orjson
import pytest

from spark_monitoring.config import Profiles
from spark_monitoring.loaders.clients import MetricsClient
from spark_monitoring.loaders.fetchers import BaseFetcher
from spark_monitoring.router import CommandRouter, Session

NOW = datetime(2016, 4, 11, 14, 25, 10)


def pretty(payload) -> bytes:
    """Render ``payload`` the way the Spark REST api does, one key per line."""
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)


class StubFetcher(BaseFetcher):
    def __init__(self, bodies):
        self.bodies = bodies
        self.paths = []

    def fetch(self, path):
        self.paths.append(path)
        body = self.bodies.get(path)
        if body is None:
            return []
        return body.decode("utf-8").splitlines()


@pytest.fixture
def sample_applications():
    return [
        {
            "id": "app-20160411083013-0000",
            "name": "Spark Pi",
            "attempts": [
                {
                    "startTime": "2016-04-11T08:30:23.123GMT",
                    "endTime": "2016-04-11T08:30:33.123GMT",
                    "lastUpdated": "2016-04-11T08:30:33.123GMT",
                    "duration": 10000,
                    "sparkUser": "spark",
                    "completed": True,
                }
            ],
        }
    ]


@pytest.fixture
def sample_jobs():
    return [
        {
            "jobId": 2,
            "name": "count at <console>:26",
            "submissionTime": "2016-04-11T20:10:00.000GMT",
            "stageIds": [3],
            "status": "RUNNING",
            "numTasks": 8,
            "numActiveTasks": 4,
            "numCompletedTasks": 4,
            "numSkippedTasks": 0,
            "numFailedTasks": 0,
            "killedTasksSummary": {},
        },
        {
            "jobId": 1,
            "name": "collect at <console>:24",
            "description": "nightly load",
            "submissionTime": "2016-04-11T09:10:00.000GMT",
            "completionTime": "2016-04-11T09:10:02.500GMT",
            "stageIds": [1, 2],
            "status": "FAILED",
            "numTasks": 4,
            "numActiveTasks": 0,
            "numCompletedTasks": 3,
            "numSkippedTasks": 0,
            "numFailedTasks": 1,
            "killedTasksSummary": {},
        },
        {
            "jobId": 0,
            "name": "reduce at SparkPi.scala:38",
            "submissionTime": "2016-04-11T08:10:00.000GMT",
            "completionTime": "2016-04-11T08:10:01.000GMT",
            "stageIds": [0],
            "status": "SUCCEEDED",
            "numTasks": 2,
            "numActiveTasks": 0,
            "numCompletedTasks": 2,
            "numSkippedTasks": 0,
            "numFailedTasks": 0,
            "killedTasksSummary": {},
        },
    ]


@pytest.fixture
def sample_stages():
    return [
        {
            "status": "COMPLETE",
            "stageId": 0,
            "attemptId": 0,
            "numTasks": 2,
            "numActiveTasks": 0,
            "numCompleteTasks": 2,
            "numFailedTasks": 0,
            "inputBytes": 2500000,
            "inputRecords": 100,
            "outputBytes": 0,
            "outputRecords": 0,
            "name": "reduce at SparkPi.scala:38",
            "details": "org.apache.spark.rdd.RDD.reduce(RDD.scala:1025)",
            "schedulingPool": "default",
        }
    ]


@pytest.fixture
def profiles():
    return Profiles.from_properties(
        {
            "default.spark.monitoring.host": "localhost",
            "default.spark.monitoring.port": "4040",
            "prod.spark.monitoring.host": "spark-history.example.com",
            "prod.spark.monitoring.port": "18080",
        }
    )


@pytest.fixture
def bodies(sample_applications, sample_jobs, sample_stages):
    app_id = sample_applications[0]["id"]
    return {
        "/applications": pretty(sample_applications),
        f"/applications/{app_id}/jobs": pretty(sample_jobs),
        f"/applications/{app_id}/jobs/": pretty(sample_jobs),
        f"/applications/{app_id}/jobs/1": pretty(sample_jobs[1]),
        f"/applications/{app_id}/stages": pretty(sample_stages),
    }


@pytest.fixture
def fetcher(bodies):
    return StubFetcher(bodies)


@pytest.fixture
def router(profiles, fetcher):
    return CommandRouter(
        profiles,
        client_factory=lambda profile: MetricsClient(profile, fetcher=fetcher),
        clock=lambda: NOW,
    )


@pytest.fixture
def session():
    return Session()
