import enum

import attr


class Code(enum.Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ResultType(enum.Enum):
    TEXT = "TEXT"
    TABLE = "TABLE"


@attr.s(frozen=True)
class InterpreterResult:
    code: Code = attr.ib()
    type: ResultType = attr.ib(default=ResultType.TEXT)
    message: str = attr.ib(default="")

    @classmethod
    def table(cls, text: str) -> "InterpreterResult":
        return cls(Code.SUCCESS, ResultType.TABLE, text)

    @classmethod
    def text(cls, code: Code, text: str) -> "InterpreterResult":
        return cls(code, ResultType.TEXT, text)

    @property
    def ok(self) -> bool:
        return self.code is Code.SUCCESS
