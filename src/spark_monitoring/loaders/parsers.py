import logging
from typing import Dict, Iterable, List, Optional, Tuple, Type, Union

from spark_monitoring.types import Application, Job, Node, Stage

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]


def _clean(text: str) -> str:
    return text.strip().replace('"', "").replace(",", "")


def _lines(body) -> Iterable[str]:
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    if isinstance(body, str):
        return body.splitlines()
    return (
        line.decode("utf-8") if isinstance(line, bytes) else line for line in body
    )


def extract_pairs(body: Union[bytes, str, Iterable[Union[bytes, str]]]) -> List[Pair]:
    """Flatten a response body into ``(key, value)`` pairs, one per ``key: value`` line.

    Only the first ``:`` splits a line, so timestamps keep their colons.
    Double quotes and commas are dropped from both sides and lines without a
    colon (brackets, braces, list items) are skipped.
    """
    pairs = []
    for line in _lines(body):
        key, sep, value = line.partition(":")
        if not sep:
            continue
        pairs.append((_clean(key), _clean(value)))
    return pairs


class RecordGrouper:
    """Materialize records of one type out of a flat pair stream.

    Idle until the leading key shows up, then Building: fields are collected
    until the trailing key emits the record and returns to Idle. A new leading
    key while Building drops the partial record, and so does the end of the
    stream.
    """

    def __init__(self, node_cls: Type[Node]):
        self.node_cls = node_cls
        self.leading_key = node_cls.leading_key.lower()
        self.trailing_key = node_cls.trailing_key.lower()
        self.field_map = node_cls.field_map()

    def group(self, pairs: Iterable[Pair]) -> List[Node]:
        records = []
        building: Optional[Dict[str, str]] = None
        for key, value in pairs:
            lowered = key.lower()
            if lowered == self.leading_key:
                if building is not None:
                    logger.debug("Dropping incomplete %s", self.node_cls.__name__)
                building = {}
            if building is None:
                continue
            name = self.field_map.get(lowered)
            if name is not None:
                building[name] = value
            if lowered == self.trailing_key:
                records.append(self.node_cls.create_from_dict(building))
                building = None
        if building is not None:
            logger.debug("Dropping incomplete %s at end of stream", self.node_cls.__name__)
        return records


class BaseParser:
    node_cls = None

    def execute(self, response_data):
        return self._node_transform(self._parse(response_data))

    def _parse(self, data):
        return extract_pairs(data)

    def _node_transform(self, data):
        if self.node_cls is None:
            return data
        records = RecordGrouper(self.node_cls).group(data)
        logger.debug("Parsed %d %s records", len(records), self.node_cls.__name__)
        return records


class ApplicationsParser(BaseParser):
    node_cls = Application


class JobsParser(BaseParser):
    node_cls = Job


class StagesParser(BaseParser):
    node_cls = Stage
