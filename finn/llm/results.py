"""Tagged results for LLM call sites."""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successfully parsed LLM response."""
    value: T


@dataclass(frozen=True)
class ParseError:
    """An LLM response that could not be used.

    ``raw_text`` is empty when the call itself failed.
    """
    raw_text: str
    reason: str


LLMResult = Union[Ok[T], ParseError]
