from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Attachment:
    name: str
    type: str
    data: str  # base64

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "data": self.data}


@dataclass(frozen=True)
class Notice:
    id: str
    teacher_id: str
    teacher_name: str
    title: str
    content: str
    timestamp: int
    attachments: Tuple[Attachment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "title": self.title,
            "content": self.content,
            "attachments": [a.to_dict() for a in self.attachments],
            "timestamp": self.timestamp,
        }
