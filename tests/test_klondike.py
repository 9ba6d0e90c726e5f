from solitaire.cards import CLUBS, DIAMONDS, HEARTS, SPADES, STANDARD_SUITS, Card
from solitaire.game import Game, MoveKind
from solitaire.piles import PileType
from solitaire.rules import DEFAULT_MAXIMUM_SCORE
from solitaire.variants import Variant, create_variant


def new_game(seed=11, observer=None):
    deck, rules = create_variant(Variant.KLONDIKE)
    game = Game(deck, rules, seed=seed, observer=observer)
    game.start_new_game()
    return game


def clear_table(game):
    for pile in game.piles:
        pile.clear()


def up(suit, rank):
    return Card(suit, rank, face_up=True)


def down(suit, rank):
    return Card(suit, rank, face_up=False)


def test_new_deal_shape():
    game = new_game()

    tableau = game.piles_of_type(PileType.TABLEAU)
    assert [len(pile) for pile in tableau] == [1, 2, 3, 4, 5, 6, 7]
    for pile in tableau:
        assert pile.top_card().face_up
        assert not any(card.face_up for card in pile.cards[:-1])

    stock = game.get_pile(PileType.STOCK, 0)
    assert len(stock) == 24
    assert not any(card.face_up for card in stock)
    assert game.get_pile(PileType.WASTE, 0).is_empty()
    assert all(pile.is_empty() for pile in game.piles_of_type(PileType.FOUNDATION))
    assert game.piles_of_type(PileType.FREECELL) == []
    assert game.total_cards_in_piles() == 52
    assert game.score == 0
    assert not game.game_won


def test_same_seed_same_deal():
    first = new_game(seed=5)
    second = new_game(seed=5)
    assert [str(card) for card in first.get_pile(PileType.STOCK, 0)] == [
        str(card) for card in second.get_pile(PileType.STOCK, 0)
    ]


def test_ace_to_foundation_scores_and_flips():
    game = new_game()
    clear_table(game)
    hidden = down(SPADES, 5)
    ace = up(HEARTS, 1)
    column = game.get_pile(PileType.TABLEAU, 0)
    column.add_cards([hidden, ace])
    foundation = game.get_pile(PileType.FOUNDATION, 0)

    assert game.make_move(ace, foundation)

    assert foundation.top_card() is ace
    assert game.score == 10
    assert hidden.face_up
    assert game.moves[-1].kind is MoveKind.MOVE
    assert game.moves[-1].flipped_card is hidden

    assert game.undo_move()
    assert column.cards == [hidden, ace]
    assert not hidden.face_up
    assert foundation.is_empty()
    assert game.score == 0


def test_foundation_cards_cannot_leave():
    game = new_game()
    clear_table(game)
    ace = up(HEARTS, 1)
    game.get_pile(PileType.FOUNDATION, 0).add_card(ace)
    column = game.get_pile(PileType.TABLEAU, 0)
    column.add_card(up(SPADES, 2))

    assert game.rules.is_valid_tableau_move(ace, column, game)
    assert not game.rules.can_card_be_moved_from_pile(ace, game.get_pile(PileType.FOUNDATION, 0), game)
    assert not game.make_move(ace, column)
    assert len(column) == 1
    assert game.score == 0
    assert game.moves == []


def test_only_kings_fill_empty_columns():
    game = new_game()
    clear_table(game)
    king = up(CLUBS, 13)
    queen = up(HEARTS, 12)
    game.get_pile(PileType.TABLEAU, 0).add_card(queen)
    game.get_pile(PileType.TABLEAU, 1).add_card(king)
    empty = game.get_pile(PileType.TABLEAU, 2)

    assert not game.make_move(queen, empty)
    assert game.make_move(king, empty)
    assert game.make_move(queen, empty)
    assert empty.cards == [king, queen]


def test_tableau_builds_down_in_alternating_colours():
    game = new_game()
    clear_table(game)
    target = game.get_pile(PileType.TABLEAU, 0)
    target.add_card(up(SPADES, 9))
    red_eight = up(DIAMONDS, 8)
    black_eight = up(CLUBS, 8)
    game.get_pile(PileType.TABLEAU, 1).add_card(red_eight)
    game.get_pile(PileType.TABLEAU, 2).add_card(black_eight)

    assert game.get_valid_moves(black_eight) == []
    assert game.get_valid_moves(red_eight) == [target]
    assert not game.make_move(black_eight, target)
    assert game.make_move(red_eight, target)


def test_run_moves_as_a_unit():
    game = new_game()
    clear_table(game)
    hidden = down(DIAMONDS, 3)
    queen = up(CLUBS, 12)
    jack = up(HEARTS, 11)
    source = game.get_pile(PileType.TABLEAU, 0)
    source.add_cards([hidden, queen, jack])
    target = game.get_pile(PileType.TABLEAU, 1)
    target.add_card(up(HEARTS, 13))

    assert game.move_run(queen, target)

    assert [card.rank for card in target] == [13, 12, 11]
    assert source.cards == [hidden]
    assert hidden.face_up
    assert game.moves[-1].kind is MoveKind.STACK
    assert game.score == 1

    assert game.undo_move()
    assert source.cards == [hidden, queen, jack]
    assert not hidden.face_up
    assert len(target) == 1


def test_runs_never_go_to_foundation():
    game = new_game()
    clear_table(game)
    foundation = game.get_pile(PileType.FOUNDATION, 0)
    foundation.add_card(up(CLUBS, 1))
    two = up(CLUBS, 2)
    game.get_pile(PileType.TABLEAU, 0).add_cards([two, up(HEARTS, 1)])

    assert not game.move_run(two, foundation)
    assert len(foundation) == 1


def test_score_ceiling_is_the_default():
    assert new_game().rules.get_maximum_score() == DEFAULT_MAXIMUM_SCORE


def test_draw_recycle_and_undo():
    game = new_game(seed=2)
    clear_table(game)
    stock = game.get_pile(PileType.STOCK, 0)
    waste = game.get_pile(PileType.WASTE, 0)
    cards = [down(SPADES, 4), down(HEARTS, 7), down(CLUBS, 10)]
    stock.add_cards(cards)

    assert game.draw_from_stock()
    assert waste.cards == [cards[2]]
    assert cards[2].face_up
    assert game.draw_from_stock()
    assert game.draw_from_stock()
    assert stock.is_empty()
    assert waste.cards == list(reversed(cards))

    assert game.draw_from_stock()
    assert game.moves[-1].kind is MoveKind.REDEAL
    assert waste.is_empty()
    assert len(stock) == 3
    assert not any(card.face_up for card in stock)

    assert game.undo_move()
    assert stock.is_empty()
    assert waste.cards == list(reversed(cards))
    assert all(card.face_up for card in waste)

    for _ in range(3):
        assert game.undo_move()
    assert stock.cards == cards
    assert not any(card.face_up for card in stock)
    assert waste.is_empty()
    assert not game.undo_move()


def test_waste_top_plays_but_stock_does_not():
    game = new_game()
    clear_table(game)
    stock_ace = down(SPADES, 1)
    game.get_pile(PileType.STOCK, 0).add_card(stock_ace)
    waste_ace = up(DIAMONDS, 1)
    game.get_pile(PileType.WASTE, 0).add_card(waste_ace)
    foundation = game.get_pile(PileType.FOUNDATION, 0)

    assert not game.make_move(stock_ace, foundation)
    assert game.make_move(waste_ace, foundation)
    assert game.get_pile(PileType.WASTE, 0).is_empty()


def test_last_king_wins_the_game():
    events = []
    game = new_game(observer=events.append)
    clear_table(game)
    foundations = game.piles_of_type(PileType.FOUNDATION)
    for pile, suit in zip(foundations, STANDARD_SUITS):
        ranks = range(1, 14) if suit != SPADES else range(1, 13)
        pile.add_cards([up(suit, rank) for rank in ranks])
    king = up(SPADES, 13)
    game.get_pile(PileType.TABLEAU, 3).add_card(king)

    assert not game.check_win_condition()
    assert game.make_move(king, foundations[0])

    assert game.game_won
    assert [event.name for event in events][-2:] == ["move", "won"]
