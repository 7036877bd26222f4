import pytest

from chaktrang.core.exceptions.base import InvalidOutcomeError
from chaktrang.core.service.account.models.account import BALANCE_LIMIT, ProgressionState
from chaktrang.core.service.progression.models import GameOutcome, GameResult
from chaktrang.core.service.progression.rules import MAX_REWARD_PER_GAME, apply_game_result


def win(level, coins=0, diamonds=0):
    return GameResult(outcome=GameOutcome.WIN, level_played=level, coins_earned=coins, diamonds_earned=diamonds)


def test_win_at_frontier_levels_up():
    """Level 3, highest 5: winning level 3 unlocks level 4"""
    state = ProgressionState(current_level=3, highest_level=5, coins=100, diamonds=2)

    updated = apply_game_result(state, win(3, coins=50, diamonds=1))

    assert updated.current_level == 4
    assert updated.highest_level == 5
    assert updated.total_wins == 1
    assert updated.coins == 150
    assert updated.diamonds == 3
    assert updated.experience_points == 100


def test_win_replaying_other_level_does_not_level_up():
    state = ProgressionState(current_level=4, highest_level=5)

    updated = apply_game_result(state, win(5))

    assert updated.current_level == 4
    assert updated.highest_level == 5
    assert updated.total_wins == 1


def test_win_below_frontier_does_not_level_up():
    state = ProgressionState(current_level=4, highest_level=5)

    updated = apply_game_result(state, win(2))

    assert updated.current_level == 4
    assert updated.highest_level == 5


def test_highest_level_follows_level_up():
    """highest_level never trails current_level"""
    state = ProgressionState(current_level=1, highest_level=1)

    updated = apply_game_result(state, win(1))

    assert updated.current_level == 2
    assert updated.highest_level == 2


def test_win_above_highest_raises_highest():
    state = ProgressionState(current_level=2, highest_level=2)

    updated = apply_game_result(state, win(7))

    assert updated.current_level == 2
    assert updated.highest_level == 7


def test_level_caps_at_fifty():
    state = ProgressionState(current_level=50, highest_level=50)

    updated = apply_game_result(state, win(50))

    assert updated.current_level == 50
    assert updated.highest_level == 50


def test_win_at_forty_nine_reaches_fifty():
    state = ProgressionState(current_level=49, highest_level=49)

    assert apply_game_result(state, win(49)).current_level == 50


def test_loss_counts_and_grants_experience():
    state = ProgressionState(current_level=3, highest_level=3)

    updated = apply_game_result(state, GameResult(outcome=GameOutcome.LOSS, level_played=3, coins_earned=5))

    assert updated.total_losses == 1
    assert updated.total_wins == 0
    assert updated.experience_points == 25
    assert updated.coins == state.coins + 5
    assert updated.current_level == 3


def test_draw_counts_and_grants_experience_without_level_effect():
    state = ProgressionState(current_level=3, highest_level=3)

    updated = apply_game_result(state, GameResult(outcome=GameOutcome.DRAW, level_played=3))

    assert updated.total_draws == 1
    assert updated.experience_points == 50
    assert updated.current_level == 3
    assert updated.highest_level == 3


@pytest.mark.parametrize("coins,diamonds", [(-10, 0), (0, -1), (-5, -5)])
def test_negative_rewards_are_rejected(coins, diamonds):
    state = ProgressionState()

    with pytest.raises(InvalidOutcomeError):
        apply_game_result(state, win(1, coins=coins, diamonds=diamonds))


@pytest.mark.parametrize("level", [0, -1, 51])
def test_level_out_of_range_is_rejected(level):
    with pytest.raises(InvalidOutcomeError):
        apply_game_result(ProgressionState(), win(level))


def test_input_state_is_not_mutated():
    state = ProgressionState(current_level=3, highest_level=3)

    apply_game_result(state, win(3, coins=10))

    assert state == ProgressionState(current_level=3, highest_level=3)


@pytest.mark.parametrize("coins,diamonds", [(MAX_REWARD_PER_GAME + 1, 0), (0, MAX_REWARD_PER_GAME + 1), (10**19, 0)])
def test_rewards_above_per_game_cap_are_rejected(coins, diamonds):
    with pytest.raises(InvalidOutcomeError):
        apply_game_result(ProgressionState(), win(1, coins=coins, diamonds=diamonds))


def test_reward_at_cap_is_accepted():
    updated = apply_game_result(ProgressionState(coins=0), win(1, coins=MAX_REWARD_PER_GAME))

    assert updated.coins == MAX_REWARD_PER_GAME


def test_balances_saturate_at_column_limit():
    state = ProgressionState(coins=BALANCE_LIMIT - 5, diamonds=BALANCE_LIMIT)

    updated = apply_game_result(state, win(1, coins=100, diamonds=1))

    assert updated.coins == BALANCE_LIMIT
    assert updated.diamonds == BALANCE_LIMIT


def test_games_played_counts_every_outcome():
    state = ProgressionState()
    for outcome in (GameOutcome.WIN, GameOutcome.LOSS, GameOutcome.DRAW):
        state = apply_game_result(state, GameResult(outcome=outcome, level_played=1))

    assert state.games_played == 3
    assert state.win_rate == 33.3


def test_win_streak_grows_on_wins_and_resets_on_loss():
    state = ProgressionState(current_level=5, highest_level=5)

    state = apply_game_result(state, win(1))
    state = apply_game_result(state, win(1))
    assert state.win_streak == 2

    state = apply_game_result(state, GameResult(outcome=GameOutcome.DRAW, level_played=1))
    assert state.win_streak == 2

    state = apply_game_result(state, GameResult(outcome=GameOutcome.LOSS, level_played=1))
    assert state.win_streak == 0


def test_win_rate_without_games():
    assert ProgressionState().win_rate == 0.0
