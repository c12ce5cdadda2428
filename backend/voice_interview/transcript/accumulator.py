from typing import Iterable

from .models import TranscriptMessage


class TranscriptAccumulator:
    """
    Holds the final transcript log for ONE call session.

    Append-only. Entries are never removed or reordered; the whole log is
    cleared only by reset(), which the controller calls on call start.
    """

    def __init__(self):
        self._messages: list[TranscriptMessage] = []

    def reset(self) -> None:
        self._messages = []

    def append(self, message: TranscriptMessage) -> None:
        self._messages.append(message)

    def snapshot(self) -> tuple[TranscriptMessage, ...]:
        return tuple(self._messages)

    def serialize(self) -> str:
        return serialize_transcript(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


def serialize_transcript(messages: Iterable[TranscriptMessage]) -> str:
    lines = []
    for message in messages:
        line = f"{message.role}: {message.content}".strip()
        if line:
            lines.append(line)
    return "\n".join(lines)
