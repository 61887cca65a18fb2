import pytest

from carousel_engine import BACK_FACE, FRONT_FACE, Card, CarouselState


def test_initial_state(make_deck) -> None:
    deck = make_deck(3)
    assert deck.current_index == 0
    assert deck.flipped == set()
    assert all(not deck.is_flipped(i) for i in range(3))


def test_empty_deck_rejected() -> None:
    with pytest.raises(ValueError):
        CarouselState(cards=())


def test_from_payload_builds_cards() -> None:
    deck = CarouselState.from_payload([{"front": "f", "back": "b"}])
    assert deck.cards == (Card(front="f", back="b"),)


@pytest.mark.parametrize("n", [1, 2, 5, 12])
def test_next_reaches_end_in_n_minus_one_steps(make_deck, n: int) -> None:
    deck = make_deck(n)
    steps = 0
    while deck.can_go_next:
        deck.next()
        steps += 1
    assert steps == n - 1
    assert deck.current_index == n - 1

    steps = 0
    while deck.can_go_prev:
        deck.prev()
        steps += 1
    assert steps == n - 1
    assert deck.current_index == 0


def test_out_of_bounds_navigation_is_noop(make_deck) -> None:
    deck = make_deck(2)
    deck.prev()
    assert deck.current_index == 0
    deck.next()
    deck.flip()
    deck.next()
    assert deck.current_index == 1
    assert deck.is_flipped(1) is True


def test_flip_is_an_involution(make_deck) -> None:
    deck = make_deck(2)
    deck.flip()
    assert deck.is_flipped(0) is True
    deck.flip()
    assert deck.is_flipped(0) is False


def test_leaving_a_flipped_card_resets_it(make_deck) -> None:
    deck = make_deck(3)
    deck.flip()
    deck.next()
    assert deck.is_flipped(0) is False
    deck.flip()
    deck.prev()
    assert deck.is_flipped(1) is False
    deck.next()
    assert deck.render_frame().visible_face == FRONT_FACE


def test_navigation_does_not_touch_other_cards(make_deck) -> None:
    deck = make_deck(3)
    deck.flipped.add(2)
    deck.next()
    assert deck.is_flipped(2) is True


def test_single_card_deck_controls(make_deck) -> None:
    deck = make_deck(1)
    frame = deck.render_frame()
    assert frame.prev_disabled is True
    assert frame.next_disabled is True
    assert frame.position_label == "Card 1 of 1"
    deck.flip()
    assert deck.render_frame().visible_face == BACK_FACE


def test_frame_shows_exactly_one_face(make_deck) -> None:
    deck = make_deck(2)
    frame = deck.render_frame()
    assert (frame.front_visible, frame.back_visible) == (True, False)
    assert frame.visible_text == "Q0"
    deck.flip()
    frame = deck.render_frame()
    assert (frame.front_visible, frame.back_visible) == (False, True)
    assert frame.visible_text == "A0"


def test_affordances_track_position(make_deck) -> None:
    deck = make_deck(3)
    labels = []
    for _ in range(3):
        frame = deck.render_frame()
        labels.append((frame.position_label, frame.prev_disabled, frame.next_disabled))
        deck.next()
    assert labels == [
        ("Card 1 of 3", True, False),
        ("Card 2 of 3", False, False),
        ("Card 3 of 3", False, True),
    ]
