from dataclasses import dataclass
from typing import Literal


MessageRole = Literal["user", "assistant", "system"]
MESSAGE_ROLES = ("user", "assistant", "system")


@dataclass(frozen=True)
class TranscriptMessage:
    """
    One FINAL utterance.
    Never mutated once it enters the log.
    """
    role: MessageRole
    content: str


@dataclass
class InterviewTurn:
    """
    One main question plus the candidate's spoken answer.
    Derived from the transcript log, never stored in it.
    """
    order_index: int
    question_text: str
    question_category: str
    answer_text: str = ""

    def add_answer(self, text: str) -> None:
        cleaned = str(text or "").strip()
        if not cleaned:
            return
        if self.answer_text:
            self.answer_text += "\n" + cleaned
        else:
            self.answer_text = cleaned
