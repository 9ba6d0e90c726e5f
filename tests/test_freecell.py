from solitaire.cards import CLUBS, DIAMONDS, HEARTS, SPADES, Card
from solitaire.game import Game
from solitaire.piles import PileType
from solitaire.variants import create_variant
from solitaire.variants.freecell import supermove_capacity


def new_game(seed=4):
    deck, rules = create_variant("freecell")
    game = Game(deck, rules, seed=seed)
    game.start_new_game()
    return game


def up(suit, rank):
    return Card(suit, rank, face_up=True)


def clear_table(game):
    for pile in game.piles:
        pile.clear()


def alternating_run(top_rank, length):
    suits = [SPADES, HEARTS, CLUBS, DIAMONDS]
    return [up(suits[i % 4], top_rank - i) for i in range(length)]


def blocked_columns(game, run):
    """Put ``run`` on column 0, leave column 1 empty and fill every other column."""
    clear_table(game)
    game.get_pile(PileType.TABLEAU, 0).add_cards(run)
    for pile in game.piles_of_type(PileType.TABLEAU)[2:]:
        pile.add_card(up(CLUBS, 13))
    return game.get_pile(PileType.TABLEAU, 1)


def test_deal_is_open_and_uses_every_card():
    game = new_game()

    assert [len(pile) for pile in game.piles_of_type(PileType.TABLEAU)] == [7, 7, 7, 7, 6, 6, 6, 6]
    assert all(card.face_up for pile in game.piles for card in pile)
    cells = game.piles_of_type(PileType.FREECELL)
    assert len(cells) == 4
    assert all(cell.max_cards == 1 and cell.is_empty() for cell in cells)
    assert game.get_pile(PileType.STOCK, 0) is None
    assert game.total_cards_in_piles() == 52


def test_supermove_capacity():
    assert supermove_capacity(4, 0) == 5
    assert supermove_capacity(0, 0) == 1
    assert supermove_capacity(2, 1) == 6
    assert supermove_capacity(4, 2) == 20


def test_five_card_run_fits_four_cells():
    game = new_game()
    run = alternating_run(9, 5)
    target = blocked_columns(game, run)

    assert game.rules.max_movable_cards(game, target) == 5
    assert game.rules.can_move_stack(run, target, game)
    assert game.move_run(run[0], target)
    assert target.cards == run
    assert game.get_pile(PileType.TABLEAU, 0).is_empty()


def test_six_card_run_is_too_long():
    game = new_game()
    run = alternating_run(10, 6)
    target = blocked_columns(game, run)

    assert not game.rules.can_move_stack(run, target, game)
    assert not game.move_run(run[0], target)
    assert target.is_empty()
    assert game.get_pile(PileType.TABLEAU, 0).cards == run
    assert game.moves == []


def test_occupied_cells_shrink_capacity():
    game = new_game()
    run = alternating_run(9, 5)
    target = blocked_columns(game, run)
    game.get_pile(PileType.FREECELL, 0).add_card(up(HEARTS, 2))

    assert game.rules.max_movable_cards(game, target) == 4
    assert not game.move_run(run[0], target)
    assert game.move_run(run[1], target)


def test_free_cells_hold_one_card_each():
    game = new_game()
    clear_table(game)
    first = up(SPADES, 7)
    second = up(HEARTS, 3)
    game.get_pile(PileType.TABLEAU, 0).add_cards([second, first])
    cell = game.get_pile(PileType.FREECELL, 0)

    assert game.make_move(first, cell)
    assert not game.make_move(second, cell)
    assert game.make_move(second, game.get_pile(PileType.FREECELL, 1))
    assert game.score == 0

    assert game.make_move(first, game.get_pile(PileType.TABLEAU, 5))
    assert cell.is_empty()


def test_cannot_pull_buried_card():
    game = new_game()
    clear_table(game)
    buried = up(SPADES, 1)
    game.get_pile(PileType.TABLEAU, 0).add_cards([buried, up(SPADES, 8)])

    assert not game.make_move(buried, game.get_pile(PileType.FOUNDATION, 0))
    assert not game.move_run(buried, game.get_pile(PileType.FOUNDATION, 0))


def test_runs_never_go_to_foundation_or_cell():
    game = new_game()
    clear_table(game)
    foundation = game.get_pile(PileType.FOUNDATION, 0)
    foundation.add_card(up(HEARTS, 1))
    two = up(HEARTS, 2)
    source = game.get_pile(PileType.TABLEAU, 0)
    source.add_cards([two, up(SPADES, 1)])

    assert game.rules.is_valid_move(two, foundation, game)
    assert not game.rules.can_move_stack(source.cards, foundation, game)
    assert not game.move_run(two, foundation)
    assert not game.move_run(two, game.get_pile(PileType.FREECELL, 0))
    assert [str(card) for card in foundation] == ["A♥"]
    assert source.cards[0] is two
    assert game.moves == []
