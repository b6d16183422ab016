import pytest
from conftest import pretty

from spark_monitoring.loaders.parsers import (
    ApplicationsParser,
    JobsParser,
    RecordGrouper,
    StagesParser,
    extract_pairs,
)
from spark_monitoring.types import Application, Job, Stage


def test_extract_pairs_splits_on_first_colon_and_strips_quotes_and_commas():
    body = [
        '  "id" : "app-1",',
        '  "startTime" : "2016-04-11T08:30:23.123GMT",',
        '  "name" : "a, b",',
    ]
    assert extract_pairs(body) == [
        ("id", "app-1"),
        ("startTime", "2016-04-11T08:30:23.123GMT"),
        ("name", "a b"),
    ]


def test_extract_pairs_skips_lines_without_colon():
    assert extract_pairs(["foo", "[ {", '"id" : 1,', "} ]"]) == [("id", "1")]


def test_extract_pairs_accepts_bytes():
    assert extract_pairs(b'{\n  "id": "app-1"\n}') == [("id", "app-1")]
    assert extract_pairs([b'"id": "app-1",']) == [("id", "app-1")]


def test_grouper_emits_records_in_order(sample_jobs):
    jobs = RecordGrouper(Job).group(extract_pairs(pretty(sample_jobs)))
    assert [job.jobId for job in jobs] == ["2", "1", "0"]


def test_grouper_drops_trailing_partial_record():
    pairs = [
        ("id", "app-1"),
        ("completed", "true"),
        ("id", "app-2"),
        ("name", "never completed"),
    ]
    applications = RecordGrouper(Application).group(pairs)
    assert [a.id for a in applications] == ["app-1"]


def test_grouper_restarts_on_leading_key():
    pairs = [
        ("id", "app-1"),
        ("name", "first"),
        ("id", "app-2"),
        ("completed", "false"),
    ]
    (application,) = RecordGrouper(Application).group(pairs)
    assert application.id == "app-2"
    assert application.name is None
    assert application.completed is False


def test_grouper_ignores_pairs_outside_records():
    pairs = [("name", "orphan"), ("completed", "true")]
    assert RecordGrouper(Application).group(pairs) == []


def test_grouper_matches_keys_case_insensitively():
    pairs = [("JOBID", "7"), ("NumTasks", "3"), ("numfailedtasks", "0")]
    (job,) = RecordGrouper(Job).group(pairs)
    assert (job.jobId, job.numTasks, job.numFailedTasks) == ("7", 3, 0)


def test_bad_field_values_are_left_unset():
    pairs = [
        ("jobId", "7"),
        ("submissionTime", "not a date"),
        ("numTasks", "many"),
        ("numFailedTasks", "0"),
    ]
    (job,) = RecordGrouper(Job).group(pairs)
    assert job.submissionTime is None
    assert job.numTasks is None
    assert job.numFailedTasks == 0


@pytest.mark.parametrize(
    "parser, fixture_name, count",
    [
        (ApplicationsParser(), "sample_applications", 1),
        (JobsParser(), "sample_jobs", 3),
        (StagesParser(), "sample_stages", 1),
    ],
)
def test_parsers_execute(request, parser, fixture_name, count):
    body = pretty(request.getfixturevalue(fixture_name))
    records = parser.execute(body)
    assert len(records) == count
    assert all(isinstance(r, parser.node_cls) for r in records)


def test_stage_fields(sample_stages):
    (stage,) = StagesParser().execute(pretty(sample_stages))
    assert isinstance(stage, Stage)
    assert stage.fields["stageId"] == "0"
    assert stage.inputBytes == 2500000
    assert stage.details == "org.apache.spark.rdd.RDD.reduce(RDD.scala:1025)"
