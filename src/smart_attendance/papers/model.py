from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QuestionPaper:
    id: str
    teacher_id: str
    teacher_name: str
    subject: str
    year: str
    title: str
    file_name: str
    file_data: str  # base64
    uploaded_at: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "teacherId": self.teacher_id,
            "teacherName": self.teacher_name,
            "subject": self.subject,
            "year": self.year,
            "title": self.title,
            "fileName": self.file_name,
            "fileData": self.file_data,
            "uploadedAt": self.uploaded_at,
        }
