from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from pymauth.errors import ProtocolError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    带标签的结果：成功时携带值，失败时携带错误。

    校验类操作返回 Outcome 而不是 bool，调用方需要显式处理失败；
    unwrap() 在失败时抛出所携带的错误。
    """
    value: Optional[T] = None
    error: Optional[ProtocolError] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ProtocolError) -> "Outcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def stage(self) -> Optional[str]:
        return None if self.error is None else self.error.stage

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
