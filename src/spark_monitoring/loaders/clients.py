from typing import List

from spark_monitoring.loaders.fetchers import BaseFetcher, HttpFetcher
from spark_monitoring.loaders.parsers import ApplicationsParser, JobsParser, StagesParser
from spark_monitoring.types import ConnectionProfile, Node


class MetricsClient:
    def __init__(self, profile: ConnectionProfile, fetcher: BaseFetcher = None):
        self.profile = profile
        self.fetcher = fetcher or HttpFetcher(profile)
        self.parsers = {
            "applications": ApplicationsParser(),
            "jobs": JobsParser(),
            "stages": StagesParser(),
        }

    def get_node_metrics(self, node: str, path: str) -> List[Node]:
        parser = self.parsers[node]
        return parser.execute(self.fetcher.fetch(path))
