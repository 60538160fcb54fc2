# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: CompletionClient
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}


@dataclass(frozen=True)
class Completion:
    content: str
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


@runtime_checkable
class CompletionClient(Protocol):
    def complete(
            self,
            messages: List[Message],
            *,
            temperature: float = 0.3,
            max_tokens: int = 1500,
    ) -> Completion:
        ...
