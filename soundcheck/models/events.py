from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    STATUS = "status"
    SOURCES_FOUND = "sources_found"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class AssistantEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    def format(self) -> str:
        return json.dumps({"event": self.event.value, **self.data}, ensure_ascii=False)
