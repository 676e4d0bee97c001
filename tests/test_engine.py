import pytest

from crapssim_session.bets import BetCollection, BetOutcome, BetType, ComeBet, LineBet, NumberBet
from crapssim_session.config import (
    Configuration,
    OddsBetStrategy,
    OddsBetStrategyType,
    PressStrategy,
    PressStrategyType,
)
from crapssim_session.dice import RandomDice, SequenceDice
from crapssim_session.engine import can_place_bet, execute_single_roll
from crapssim_session.game_state import GameState
from crapssim_session.legalize import RoundingType


def _cfg(**overrides):
    base = dict(
        initial_bankroll=300,
        bankroll_minimum=None,
        bankroll_maximum=None,
        maximum_rolls=None,
        pass_bet=None,
    )
    base.update(overrides)
    return Configuration(**base)


def _play(cfg, rolls):
    """Run ``rolls`` through the engine from a fresh state; return every RollResult."""
    dice = SequenceDice(rolls)
    state = GameState.init(cfg)
    results = []
    for _ in rolls:
        result = execute_single_roll(state, dice)
        results.append(result)
        state = result.resulting_state
    return results


def _outcomes(result):
    return [(r.placed_bet.type, r.outcome, r.payout) for r in result.resolved_bets]


def test_come_out_eleven_wins_pass_line():
    (result,) = _play(_cfg(pass_bet=15), [(5, 6)])
    assert [b.type for b in result.new_bets] == [BetType.PASS_LINE]
    assert _outcomes(result) == [(BetType.PASS_LINE, BetOutcome.WIN, 15)]
    assert result.placed_bet_state.bankroll == 285
    assert result.resulting_state.bankroll == 315
    assert result.resulting_state.point_is_on is False
    assert result.roll == 11
    assert result.dice == (5, 6)


@pytest.mark.parametrize("craps", [(1, 1), (1, 2), (6, 6)])
def test_come_out_craps_loses_pass_line(craps):
    (result,) = _play(_cfg(pass_bet=15), [craps])
    assert _outcomes(result) == [(BetType.PASS_LINE, BetOutcome.LOSS, 0)]
    assert result.resulting_state.bankroll == 285
    assert result.resulting_state.current_bets.pass_line_bet is None


def test_seven_out_with_odds():
    cfg = _cfg(pass_bet=15, pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.SET_AMOUNT, 25))
    first, second = _play(cfg, [(3, 3), (3, 4)])
    assert first.resulting_state.point == 6
    assert [(b.type, b.amount) for b in second.new_bets] == [(BetType.PASS_LINE_ODDS, 25)]
    assert _outcomes(second) == [
        (BetType.PASS_LINE, BetOutcome.LOSS, 0),
        (BetType.PASS_LINE_ODDS, BetOutcome.LOSS, 0),
    ]
    assert second.resulting_state.point_is_on is False
    assert second.resulting_state.point == 0
    assert second.resulting_state.bankroll == 300 - 40


def test_point_made_pays_true_odds():
    cfg = _cfg(pass_bet=10, pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 2))
    _, second = _play(cfg, [(2, 4), (1, 5)])
    assert _outcomes(second) == [
        (BetType.PASS_LINE, BetOutcome.WIN, 10),
        (BetType.PASS_LINE_ODDS, BetOutcome.WIN, 24),
    ]
    # 300 - 10 - 20 + 20 + 44
    assert second.resulting_state.bankroll == 334


def test_number_four_bought_pays_39():
    cfg = _cfg(pass_bet=10, number_bet_4=20)
    first, second, third = _play(cfg, [(3, 3), (1, 1), (2, 2)])
    # number bets stay off during the come-out by default
    assert [b.type for b in first.new_bets] == [BetType.PASS_LINE]
    assert [(b.type, b.number, b.amount) for b in second.new_bets] == [(BetType.NUMBER_BET, 4, 20)]
    assert _outcomes(third) == [(BetType.NUMBER_BET, BetOutcome.WIN, 39)]
    nb = third.resulting_state.current_bets.number_bet_for(4)
    assert nb == NumberBet(4, 20, 1)
    assert third.resulting_state.bankroll == 300 - 10 - 20 + 39


def test_number_bet_not_placed_on_the_point():
    cfg = _cfg(pass_bet=10, number_bet_6=12, number_bet_8=12)
    _, second = _play(cfg, [(3, 3), (1, 2)])
    assert [(b.number, b.amount) for b in second.new_bets] == [(8, 12)]


def test_number_bets_lose_on_seven_out():
    cfg = _cfg(pass_bet=10, number_bet_5=10, number_bet_8=12)
    _, second = _play(cfg, [(3, 3), (3, 4)])
    assert [b.number for b in second.new_bets] == [8, 5]
    losses = [r for r in second.resolved_bets if r.placed_bet.type == BetType.NUMBER_BET]
    assert {r.placed_bet.number for r in losses} == {5, 8}
    assert all(r.outcome == BetOutcome.LOSS for r in losses)
    assert second.resulting_state.current_bets.number_bets == ()


def test_number_bets_off_on_come_out_unless_working():
    cfg = _cfg(pass_bet=10, number_bet_8=12)
    # point 6, 8 placed, point made, come-out 8: the 8 is off
    results = _play(cfg, [(3, 3), (1, 2), (3, 3), (4, 4)])
    last = results[-1]
    assert [r.placed_bet.type for r in last.resolved_bets] == []
    assert last.resulting_state.current_bets.number_bet_for(8) == NumberBet(8, 12, 0)

    working = _play(cfg.replace(leave_number_bets_working_during_come_out=True), [(3, 3), (1, 2), (3, 3), (4, 4)])
    assert _outcomes(working[-1]) == [(BetType.NUMBER_BET, BetOutcome.WIN, 14)]


def test_number_bets_placed_during_come_out_when_enabled():
    cfg = _cfg(pass_bet=10, number_bet_6=12, place_number_bets_during_come_out=True)
    (result,) = _play(cfg, [(2, 3)])
    assert [b.type for b in result.new_bets] == [BetType.PASS_LINE, BetType.NUMBER_BET]


def test_dont_pass_push_on_twelve():
    (result,) = _play(_cfg(dont_pass_bet=10), [(6, 6)])
    assert _outcomes(result) == [(BetType.DONT_PASS, BetOutcome.PUSH, 10)]
    assert result.resulting_state.bankroll == 300
    assert result.resulting_state.current_bets.dont_pass_bet is None


def test_dont_pass_with_lay_odds_wins_on_seven():
    cfg = _cfg(dont_pass_bet=10, dont_pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.TABLE_MAX))
    _, second = _play(cfg, [(2, 2), (3, 4)])
    assert [(b.type, b.amount) for b in second.new_bets] == [(BetType.DONT_PASS_ODDS, 60)]
    assert _outcomes(second) == [
        (BetType.DONT_PASS, BetOutcome.WIN, 10),
        (BetType.DONT_PASS_ODDS, BetOutcome.WIN, 30),
    ]
    assert second.resulting_state.bankroll == 300 - 10 - 60 + 20 + 90


def test_come_bet_travels_and_wins_on_its_point():
    cfg = _cfg(pass_bet=10, come_bet=10)
    results = _play(cfg, [(2, 2), (2, 3), (1, 4)])
    assert [b.type for b in results[1].new_bets] == [BetType.COME]
    assert results[1].resulting_state.current_bets.come_bets == (ComeBet(10, None, 5),)
    last = results[2]
    assert (BetType.COME, BetOutcome.WIN, 10) in _outcomes(last)
    # a fresh come bet went up this roll and also travelled to the 5
    assert last.resulting_state.current_bets.come_bets == (ComeBet(10, None, 5),)


def test_come_bets_capped():
    cfg = _cfg(pass_bet=10, come_bet=10, max_come_bets=2)
    results = _play(cfg, [(2, 2), (2, 3), (3, 3), (4, 4)])
    assert [b.type for b in results[3].new_bets] == []
    assert len(results[3].resulting_state.current_bets.come_bets) == 2


def test_come_odds_off_on_come_out_push():
    cfg = _cfg(
        pass_bet=10,
        come_bet=10,
        come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 1),
    )
    results = _play(cfg, [(2, 2), (2, 3), (1, 3), (3, 4)])
    assert [(b.type, b.amount) for b in results[2].new_bets] == [(BetType.COME_ODDS, 10), (BetType.COME, 10)]
    last = results[3]
    # come-out: odds not placed behind the come bet on the 4
    assert [b.type for b in last.new_bets] == [BetType.PASS_LINE]
    assert _outcomes(last) == [
        (BetType.PASS_LINE, BetOutcome.WIN, 10),
        (BetType.COME, BetOutcome.LOSS, 0),
        (BetType.COME_ODDS, BetOutcome.PUSH, 10),
        (BetType.COME, BetOutcome.LOSS, 0),
    ]
    assert last.resulting_state.bankroll == 300


def test_come_odds_working_on_come_out():
    cfg = _cfg(
        pass_bet=10,
        come_bet=10,
        come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 1),
        come_bet_odds_working_come_out=True,
    )
    results = _play(cfg, [(2, 2), (2, 3), (1, 3), (3, 4)])
    last = results[3]
    assert [(b.type, b.amount) for b in last.new_bets] == [(BetType.COME_ODDS, 10), (BetType.PASS_LINE, 10)]
    assert (BetType.COME_ODDS, BetOutcome.LOSS, 0) in _outcomes(last)
    assert last.resulting_state.current_bets.come_bets == ()


def test_press_limit_cashes_out_until_next_come_out():
    cfg = _cfg(
        pass_bet=10,
        number_bet_6=12,
        press_strategy=PressStrategy(PressStrategyType.FULL_PRESS),
        press_limit=1,
    )
    results = _play(cfg, [(2, 3), (3, 3), (4, 4), (2, 3), (1, 2)])
    hit = results[1]
    assert _outcomes(hit) == [(BetType.NUMBER_BET, BetOutcome.WIN, 14)]
    assert hit.resolved_bets[0].bankroll_credit == 26
    assert hit.resulting_state.bankroll == 300 - 10 - 12 + 26
    assert hit.resulting_state.current_bets.number_bets == ()
    assert hit.resulting_state.cashed_out_numbers == (6,)

    # same cycle: the 6 stays down
    assert results[2].new_bets == ()
    assert results[2].resulting_state.cashed_out_numbers == (6,)

    # point made on roll 4, next come-out clears the set
    assert results[4].placed_bet_state.cashed_out_numbers == ()


def test_full_press_grows_the_stake():
    cfg = _cfg(pass_bet=10, number_bet_6=12, press_strategy=PressStrategy(PressStrategyType.FULL_PRESS))
    results = _play(cfg, [(2, 3), (3, 3), (1, 5)])
    assert results[2].resulting_state.current_bets.number_bet_for(6) == NumberBet(6, 56, 2)
    # resolved record carries the stake that was riding
    assert results[2].resolved_bets[0].placed_bet.amount == 26


def test_unaffordable_bets_are_skipped():
    cfg = _cfg(initial_bankroll=100, bankroll_minimum=80, pass_bet=25, come_bet=5)
    state = GameState.init(cfg)
    result = execute_single_roll(state, SequenceDice([(2, 2)]))
    # pass line would break the $80 floor; the come bet needs a point
    assert result.new_bets == ()


def test_can_place_bet():
    assert can_place_bet(100, 10, None)
    assert can_place_bet(100, 20, 80)
    assert not can_place_bet(100, 21, 80)
    assert not can_place_bet(5, 10, None)
    assert not can_place_bet(100, 0, None)
    assert not can_place_bet(100, None, None)


def test_done_state_is_returned_unchanged():
    state = GameState(configuration=_cfg(pass_bet=10, bankroll_maximum=400), bankroll=400)
    dice = SequenceDice([(1, 1)])
    result = execute_single_roll(state, dice)
    assert result.roll == 0
    assert result.new_bets == ()
    assert result.resolved_bets == ()
    assert result.resulting_state is state
    assert dice.remaining == 1


def test_limit_reached_skips_placement_but_resolves():
    bets = BetCollection(pass_line_bet=LineBet(10))
    state = GameState(
        configuration=_cfg(pass_bet=10, maximum_rolls=5),
        roll_num=5,
        bankroll=200,
        point=4,
        point_is_on=True,
        current_bets=bets,
    )
    result = execute_single_roll(state, SequenceDice([(2, 2)]))
    assert result.new_bets == ()
    assert _outcomes(result) == [(BetType.PASS_LINE, BetOutcome.WIN, 10)]
    assert result.resulting_state.is_done()


def test_input_state_is_never_modified():
    cfg = _cfg(pass_bet=10, come_bet=10, number_bet_8=12)
    state = GameState.init(cfg)
    before = state.to_dict()
    execute_single_roll(state, SequenceDice([(2, 2)]))
    assert state.to_dict() == before


RICH_CONFIG = dict(
    initial_bankroll=1000,
    bankroll_minimum=100,
    bankroll_maximum=3000,
    maximum_rolls=300,
    pass_bet=15,
    pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.TABLE_MAX),
    come_bet=10,
    come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 2),
    dont_pass_bet=10,
    dont_pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.SET_AMOUNT, 12),
    dont_come_bet=5,
    dont_come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 1),
    max_dont_come_bets=2,
    number_bet_4=20,
    number_bet_6=12,
    number_bet_9=10,
    press_strategy=PressStrategy(PressStrategyType.POWER_PRESS),
    press_limit=3,
    leave_number_bets_working_during_come_out=True,
)


@pytest.mark.parametrize("seed", [1, 7, 2024])
@pytest.mark.parametrize("press", [PressStrategyType.POWER_PRESS, PressStrategyType.HALF_PRESS])
def test_bankroll_is_conserved_every_roll(seed, press):
    cfg = Configuration(**RICH_CONFIG).replace(press_strategy=PressStrategy(press))
    dice = RandomDice(seed)
    state = GameState.init(cfg)
    while not state.is_done():
        result = execute_single_roll(state, dice)
        staked = sum(b.amount for b in result.new_bets)
        credited = sum(r.bankroll_credit for r in result.resolved_bets)
        assert result.resulting_state.bankroll == pytest.approx(result.initial_state.bankroll - staked + credited)

        bets = result.resulting_state.current_bets
        assert len(bets.come_bets) <= cfg.max_come_bets
        assert len(bets.dont_come_bets) <= cfg.max_dont_come_bets
        numbers = [nb.number for nb in bets.number_bets]
        assert len(numbers) == len(set(numbers))
        assert result.placed_bet_state.bankroll >= 0
        if not result.resulting_state.point_is_on:
            assert result.resulting_state.point == 0
        state = result.resulting_state

    assert state.limit_reached() is not None


def test_dont_come_push_on_twelve_and_lay_odds_win_on_seven():
    cfg = _cfg(
        dont_come_bet=10,
        dont_come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 1),
    )
    results = _play(cfg, [6, 12, 5, 7])
    assert results[0].new_bets == ()
    assert _outcomes(results[1]) == [(BetType.DONT_COME, BetOutcome.PUSH, 10)]
    assert results[1].resulting_state.bankroll == 300
    assert results[2].resulting_state.current_bets.dont_come_bets == (ComeBet(10, None, 5),)
    last = results[3]
    # 10 on the 5 rounds up to 12 so the 2:3 lay pays evenly
    assert [(b.type, b.amount) for b in last.new_bets] == [(BetType.DONT_COME_ODDS, 12), (BetType.DONT_COME, 10)]
    assert _outcomes(last) == [
        (BetType.DONT_COME, BetOutcome.WIN, 10),
        (BetType.DONT_COME_ODDS, BetOutcome.WIN, 8),
        (BetType.DONT_COME, BetOutcome.LOSS, 0),
    ]
    assert last.resulting_state.bankroll == 300 - 10 - 12 - 10 + 20 + 20


def test_dont_come_own_come_out_and_loss_on_come_point():
    cfg = _cfg(
        dont_come_bet=10,
        dont_come_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.MULTIPLIER, 1),
    )
    results = _play(cfg, [6, 3, 11, 5, 5])
    assert _outcomes(results[1]) == [(BetType.DONT_COME, BetOutcome.WIN, 10)]
    assert _outcomes(results[2]) == [(BetType.DONT_COME, BetOutcome.LOSS, 0)]
    last = results[4]
    assert _outcomes(last) == [
        (BetType.DONT_COME, BetOutcome.LOSS, 0),
        (BetType.DONT_COME_ODDS, BetOutcome.LOSS, 0),
    ]
    # the fresh don't come bet travelled to the 5
    assert last.resulting_state.current_bets.dont_come_bets == (ComeBet(10, None, 5),)
    assert last.resulting_state.bankroll == 300 + 10 - 10 - 10 - 12 - 10
    assert last.resulting_state.point == 6


def test_odds_paid_in_cents():
    cfg = _cfg(
        pass_bet=10,
        pass_bet_odds_strategy=OddsBetStrategy(OddsBetStrategyType.SET_AMOUNT, 7),
        avoid_rounding=False,
        rounding=RoundingType.CENT,
    )
    _, second = _play(cfg, [6, 6])
    assert _outcomes(second) == [
        (BetType.PASS_LINE, BetOutcome.WIN, 10),
        (BetType.PASS_LINE_ODDS, BetOutcome.WIN, 8.4),
    ]
    assert second.resulting_state.bankroll == pytest.approx(300 - 10 - 7 + 20 + 15.4)
