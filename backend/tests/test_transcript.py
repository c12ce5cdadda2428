from voice_interview.transcript.accumulator import TranscriptAccumulator, serialize_transcript
from voice_interview.transcript.models import InterviewTurn, TranscriptMessage
from voice_interview.transcript.turns import extract_turns


def _msg(role: str, content: str) -> TranscriptMessage:
    return TranscriptMessage(role=role, content=content)


def test_accumulator_appends_in_order_and_resets():
    log = TranscriptAccumulator()
    log.append(_msg("assistant", "Q1: What is closure?"))
    log.append(_msg("user", "A function with its scope"))

    snapshot = log.snapshot()
    assert [m.role for m in snapshot] == ["assistant", "user"]
    assert len(log) == 2

    log.append(_msg("user", "later"))
    assert len(snapshot) == 2  # snapshots are detached from later appends

    log.reset()
    assert log.snapshot() == ()


def test_serialize_transcript_trims_lines_in_log_order():
    messages = [
        _msg("assistant", "  Hello there  "),
        _msg("user", "Hi"),
        _msg("system", ""),
    ]
    assert serialize_transcript(messages) == "assistant: Hello there\nuser: Hi\nsystem:"


def test_extract_turns_main_path():
    turns = extract_turns([
        _msg("assistant", "Q1: What is closure?"),
        _msg("user", "It's..."),
        _msg("user", "continued"),
        _msg("assistant", "Q2: Explain hoisting"),
    ])

    assert turns == [
        InterviewTurn(order_index=1, question_text="What is closure?", question_category="Q1", answer_text="It's...\ncontinued"),
        InterviewTurn(order_index=2, question_text="Explain hoisting", question_category="Q2", answer_text=""),
    ]


def test_follow_up_does_not_create_turn_and_drops_following_answer():
    turns = extract_turns([
        _msg("assistant", "Q1: A?"),
        _msg("user", "ans"),
        _msg("assistant", "F1: clarify?"),
        _msg("user", "more"),
    ])

    assert len(turns) == 1
    assert turns[0].order_index == 1
    assert turns[0].answer_text == "ans"


def test_follow_up_does_not_advance_order_counter():
    turns = extract_turns([
        _msg("assistant", "Q1: First?"),
        _msg("assistant", "f1: Really?"),
        _msg("assistant", "Q2: Second?"),
        _msg("user", "two"),
    ])

    assert [(t.order_index, t.question_category, t.answer_text) for t in turns] == [
        (1, "Q1", ""),
        (2, "Q2", "two"),
    ]


def test_untagged_assistant_lines_are_ignored():
    turns = extract_turns([
        _msg("assistant", "Great, thanks for joining."),
        _msg("user", "hello"),
        _msg("assistant", "Q1: Tell me about yourself"),
        _msg("assistant", "That's interesting."),
        _msg("user", "I build APIs"),
        _msg("assistant", "Next up, Q2: not at line start"),
        _msg("user", "  "),
    ])

    assert len(turns) == 1
    assert turns[0].question_text == "Tell me about yourself"
    assert turns[0].answer_text == "I build APIs"


def test_tag_is_case_insensitive_and_tolerates_whitespace():
    turns = extract_turns([
        _msg("assistant", "  q12 :  Describe the event loop  "),
        _msg("user", "single threaded"),
    ])

    assert turns[0].order_index == 1
    assert turns[0].question_category == "q12"
    assert turns[0].question_text == "Describe the event loop"


def test_empty_question_is_filtered_out():
    turns = extract_turns([
        _msg("assistant", "Q1: Real question"),
        _msg("user", "answer one"),
        _msg("assistant", "Q3:   "),
        _msg("user", "lost answer"),
    ])

    assert [t.question_category for t in turns] == ["Q1"]
    assert turns[0].answer_text == "answer one"


def test_no_tags_yields_no_turns():
    assert extract_turns([_msg("assistant", "Hi"), _msg("user", "Hello")]) == []
