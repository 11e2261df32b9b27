from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .message import Message


@dataclass
class SearchResult:
    """
    Result page of a channel search.

    ``messages`` holds one list per hit: the matched message (``hit=True``)
    surrounded by the context messages the service returns with it.
    """

    total_results: int
    messages: List[List[Message]] = field(default_factory=list)

    @property
    def hits(self) -> List[Message]:
        return [m for group in self.messages for m in group if m.hit]
