import pytest
from pydantic import ValidationError

from solitaire.cards import Card, HEARTS
from solitaire.piles import PileType
from solitaire.rules_schema import (
    ComparisonOperator,
    CustomBlocking,
    DealPattern,
    FaceUpPolicy,
    FlipCondition,
    FlipRule,
    FoundationComplete,
    PileCardCount,
    PileDeal,
    PileNotEmpty,
    TableauEmpty,
    parse_blocking_table,
    parse_win_conditions,
)


def test_blocking_table_parses_tagged_conditions():
    table = parse_blocking_table(
        {
            "freecell": [{"kind": "pile_not_empty", "pile_type": "stock", "description": "stock first"}],
            "foundation": [{"kind": "pile_card_count", "pile_type": "tableau", "operator": "=", "count": 0}],
        }
    )

    (stock_rule,) = table[PileType.FREECELL]
    assert isinstance(stock_rule, PileNotEmpty)
    assert stock_rule.pile_type is PileType.STOCK
    (count_rule,) = table[PileType.FOUNDATION]
    assert isinstance(count_rule, PileCardCount)
    assert count_rule.operator is ComparisonOperator.EQ


def test_unknown_condition_kind_is_rejected():
    with pytest.raises(ValidationError):
        parse_blocking_table({"freecell": [{"kind": "moon_phase", "pile_type": "stock"}]})
    with pytest.raises(ValidationError):
        parse_win_conditions([{"kind": "all_kings_dancing"}])


def test_unknown_operator_is_rejected():
    with pytest.raises(ValidationError):
        PileCardCount(pile_type=PileType.TABLEAU, operator="~=", count=3)


def test_operator_aliases_and_comparison():
    assert PileCardCount(pile_type=PileType.STOCK, operator="<>", count=1).operator is ComparisonOperator.NE
    assert ComparisonOperator.GE.compare(3, 3)
    assert ComparisonOperator.LT.compare(2, 3)
    assert not ComparisonOperator.GT.compare(3, 3)


def test_win_conditions_parse_with_quantifier():
    conditions = parse_win_conditions(
        [
            {"kind": "foundation_complete", "cards_per_pile": 13, "required": "any"},
            {"kind": "tableau_empty"},
            {"kind": "custom", "name": "my_rule"},
        ]
    )
    assert isinstance(conditions[0], FoundationComplete)
    assert conditions[0].required == "any"
    assert isinstance(conditions[1], TableauEmpty)
    assert conditions[2].name == "my_rule"

    with pytest.raises(ValidationError):
        parse_win_conditions([{"kind": "foundation_complete", "required": "most"}])


def test_conditions_are_frozen():
    condition = CustomBlocking(name="x")
    with pytest.raises(ValidationError):
        condition.name = "y"


def test_pile_deal_validation_and_face_policy():
    with pytest.raises(ValidationError):
        PileDeal(cards_per_pile=[1, -1], face_up=[True, True])
    with pytest.raises(ValidationError):
        PileDeal(cards_per_pile=[1, 2], face_up=[True])

    top_only = PileDeal.uniform([1, 3], policy=FaceUpPolicy.TOP_ONLY)
    assert top_only.is_face_up(1, 2)
    assert not top_only.is_face_up(1, 0)
    assert PileDeal.empty(4).piles == 4


def test_deal_pattern_order_must_be_declared():
    with pytest.raises(ValidationError):
        DealPattern(order=[PileType.TABLEAU, PileType.STOCK], piles={PileType.TABLEAU: PileDeal.empty(1)})

    pattern = DealPattern(
        order=[PileType.TABLEAU, PileType.STOCK],
        piles={PileType.TABLEAU: PileDeal.uniform([1, 2]), PileType.STOCK: PileDeal.uniform([5], face_up=False)},
    )
    assert pattern.total_cards() == 8


def test_flip_rule():
    card = Card(HEARTS, 4)
    assert FlipRule(flip_on_move=True, flip_condition=FlipCondition.FACE_DOWN).should_flip(card)
    card.flip()
    assert not FlipRule(flip_on_move=True, flip_condition=FlipCondition.FACE_DOWN).should_flip(card)
    assert FlipRule(flip_on_move=True, flip_condition=FlipCondition.ALWAYS).should_flip(card)
    assert not FlipRule(flip_condition=FlipCondition.ALWAYS).should_flip(card)
