from __future__ import annotations

import re
from typing import Iterable

from .models import InterviewTurn, TranscriptMessage

# Q3: main question, F3: follow-up. Anything else from the assistant is chatter.
QUESTION_TAG_PATTERN = re.compile(r"^([QF])(\d+)\s*:\s*(.*)$", re.IGNORECASE | re.DOTALL)

MAIN_QUESTION_PREFIX = "Q"
FOLLOW_UP_PREFIX = "F"


class TurnExtractor:
    """
    Folds a transcript log into question/answer turns.

    Only `Q{n}:` lines open turns. A follow-up (`F{n}:`) closes the open turn
    without opening another, so whatever the candidate says to it is dropped
    until the next main question. Never raises; an assistant that ignores the
    tag convention simply yields no turns.
    """

    def __init__(self, pattern: re.Pattern[str] = QUESTION_TAG_PATTERN):
        self.pattern = pattern

    def extract(self, messages: Iterable[TranscriptMessage]) -> list[InterviewTurn]:
        turns: list[InterviewTurn] = []
        current: InterviewTurn | None = None
        order_counter = 0

        for message in messages:
            if message.role == "assistant":
                match = self.pattern.match(str(message.content or "").strip())
                if not match:
                    continue

                prefix, number, question_text = match.group(1), match.group(2), match.group(3)
                if prefix.upper() == FOLLOW_UP_PREFIX:
                    if current is not None:
                        turns.append(current)
                        current = None
                    continue

                if current is not None:
                    turns.append(current)
                order_counter += 1
                current = InterviewTurn(
                    order_index=order_counter,
                    question_text=question_text.strip(),
                    question_category=f"{prefix}{number}",
                )
                continue

            if message.role == "user" and current is not None:
                current.add_answer(message.content)

        if current is not None:
            turns.append(current)

        return [turn for turn in turns if turn.question_text]


def extract_turns(messages: Iterable[TranscriptMessage]) -> list[InterviewTurn]:
    return TurnExtractor().extract(messages)
