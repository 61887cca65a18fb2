import pytest

from carousel_engine import Card, CarouselState
from chat_transcript import BotMessage, CardCarousel, ThinkingPlaceholder, Transcript, UserMessage


def test_append_keeps_order_and_notifies() -> None:
    seen = []
    transcript = Transcript(on_change=lambda t: seen.append(t.latest_entry))
    first = transcript.append(UserMessage(text="hi"))
    second = transcript.append(BotMessage(text="hello"))
    assert transcript.entries == (first, second)
    assert seen == [first, second]


def test_greeting_dismissed_on_first_user_message() -> None:
    transcript = Transcript()
    assert transcript.has_greeting_been_dismissed is False
    transcript.append(BotMessage(text="bot first"))
    assert transcript.has_greeting_been_dismissed is False
    transcript.append(UserMessage(text="topic"))
    assert transcript.has_greeting_been_dismissed is True


def test_remove_placeholder_is_idempotent() -> None:
    transcript = Transcript()
    transcript.append(UserMessage(text="t"))
    placeholder = transcript.append(ThinkingPlaceholder())
    assert transcript.remove_thinking_placeholder(placeholder) is True
    assert transcript.remove_thinking_placeholder(placeholder) is False
    assert transcript.remove_thinking_placeholder() is False
    assert [type(e) for e in transcript] == [UserMessage]


def test_remove_specific_placeholder_leaves_others() -> None:
    transcript = Transcript()
    p1 = transcript.append(ThinkingPlaceholder())
    p2 = transcript.append(ThinkingPlaceholder())
    transcript.remove_thinking_placeholder(p1)
    assert transcript.live_placeholders == [p2]
    transcript.remove_thinking_placeholder()
    assert transcript.live_placeholders == []


def test_rejects_unknown_entries() -> None:
    with pytest.raises(TypeError):
        Transcript().append("plain text")


def test_card_carousel_exposes_cards() -> None:
    deck = CarouselState(cards=(Card(front="f", back="b"),))
    entry = CardCarousel(carousel=deck)
    assert entry.cards == (Card(front="f", back="b"),)
    assert entry.role == "assistant"
    assert ThinkingPlaceholder().text == "..."


def test_scroll_target_follows_newest_entry() -> None:
    transcript = Transcript()
    assert transcript.scroll_target_id is None
    user = transcript.append(UserMessage(text="t"))
    placeholder = transcript.append(ThinkingPlaceholder())
    assert transcript.scroll_target_id == placeholder.entry_id
    transcript.remove_thinking_placeholder(placeholder)
    assert transcript.scroll_target_id == user.entry_id


def test_resolve_placeholder_swaps_then_notifies_once() -> None:
    seen = []
    transcript = Transcript()
    transcript.append(UserMessage(text="t"))
    placeholder = transcript.append(ThinkingPlaceholder())
    transcript.on_change = lambda t: seen.append([type(e) for e in t])
    reply = transcript.resolve_placeholder(placeholder, BotMessage(text="done"))
    assert seen == [[UserMessage, BotMessage]]
    assert transcript.scroll_target_id == reply.entry_id


def test_mutation_is_kept_when_hook_raises() -> None:
    def hook(transcript):
        raise RuntimeError("redraw failed")

    transcript = Transcript(on_change=hook)
    with pytest.raises(RuntimeError):
        transcript.append(UserMessage(text="t"))
    assert [type(e) for e in transcript] == [UserMessage]


def test_entry_roles_pick_the_chat_bubble() -> None:
    assert UserMessage(text="t").role == "user"
    assert BotMessage(text="t").role == "assistant"
    assert ThinkingPlaceholder().role == "assistant"
