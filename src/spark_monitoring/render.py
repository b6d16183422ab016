from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Sequence

NUMBER_FORMAT = "{:.1f}"
NOT_AVAILABLE = "-"


def format_value(value) -> str:
    if value is None:
        return ""
    return str(value)


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return NUMBER_FORMAT.format(value)


def format_seconds(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return format_number(value) + "s"


def format_bool(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "true" if value else "false"


def format_ratio(pair) -> str:
    part, total = pair
    return f"{format_value(part)}/{format_value(total)}"


def format_megabytes(value: Optional[int]) -> str:
    return format_number((value or 0) / 1000000) + "MB"


def format_bytes_records(pair) -> str:
    size, records = pair
    return f"{format_megabytes(size)}/{format_value(records)}"


class Column(NamedTuple):
    label: str
    extractor: Callable[[Any], Any]
    formatter: Callable[[Any], str] = format_value

    def render(self, record) -> str:
        return self.formatter(self.extractor(record))


def render_rows(rows: Iterable[Sequence[str]], header: Sequence[str]) -> str:
    lines = ["\t".join(header)]
    lines.extend("\t".join(row) for row in rows)
    return "\n".join(lines)


def render_table(records: Iterable[Any], columns: List[Column]) -> str:
    """Header row of column labels, then one tab separated row per record."""
    return render_rows(
        ([column.render(record) for column in columns] for record in records),
        [column.label for column in columns],
    )
