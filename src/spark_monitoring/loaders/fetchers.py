import abc
import logging
from typing import List

import requests
from yarl import URL

from spark_monitoring.errors import TransportError
from spark_monitoring.types import ConnectionProfile

logger = logging.getLogger(__name__)

API_PATH = "/api/v1"


class BaseFetcher:
    @abc.abstractmethod
    def fetch(self, path: str) -> List[str]:
        pass


class HttpFetcher(BaseFetcher):
    def __init__(self, profile: ConnectionProfile):
        self.profile = profile

    def get_url(self, path: str) -> URL:
        if not path.startswith("/"):
            path = "/" + path
        path, _, query = path.partition("?")
        return URL.build(
            scheme="http",
            host=self.profile.host,
            port=self.profile.port,
            path=API_PATH + path,
            query_string=query,
        )

    def fetch(self, path: str) -> List[str]:
        """GET ``path`` below the REST api root and return the body lines.

        Any status other than 200 yields no lines.
        """
        url = self.get_url(path)
        logger.info("GET %s", url)
        try:
            response = requests.get(str(url), timeout=self.profile.timeout)
        except requests.RequestException as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise TransportError(str(exc)) from exc
        if response.status_code != requests.codes.ok:
            logger.warning("%s answered with status %s", url, response.status_code)
            return []
        return response.content.decode("utf-8", errors="replace").splitlines()
