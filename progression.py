"""
Compute Wars - Milestones & Game Over

Milestones are re-checked after every successful action; the game-over
check runs only on turn-advancing actions.
"""

from typing import List
import logging

from calculations import inventory_used, max_borrowable, net_worth
from state import GameState, MilestoneProgress
from world import ConditionKind, RewardKind
from world.config import BANKRUPTCY_MULTIPLIER

logger = logging.getLogger(__name__)


def condition_met(state: GameState, progress: MilestoneProgress, worth: int) -> bool:
    milestone = progress.definition
    stats = state.stats

    if milestone.condition == ConditionKind.NET_WORTH:
        return worth >= milestone.threshold
    if milestone.condition == ConditionKind.TRADES:
        return stats.total_trades >= milestone.threshold
    if milestone.condition == ConditionKind.MARKETS_VISITED:
        return len(stats.markets_visited) >= milestone.threshold
    if milestone.condition == ConditionKind.GOODS_TRADED:
        return stats.goods_traded >= milestone.threshold
    if milestone.condition == ConditionKind.TURNS:
        return state.turn >= milestone.threshold
    if milestone.condition == ConditionKind.PAID_OFF_DEBT:
        return stats.had_debt and state.player.debt == 0
    return False


def check_milestones(state: GameState) -> List[MilestoneProgress]:
    """
    Mark newly satisfied milestones and grant their rewards.

    Also keeps the peak net worth high-water mark current.

    Returns:
        Milestones achieved by this call, in table order
    """
    achieved: List[MilestoneProgress] = []
    worth = net_worth(state)
    state.stats.peak_net_worth = max(state.stats.peak_net_worth, worth)

    for progress in state.milestones.values():
        if progress.achieved or not condition_met(state, progress, worth):
            continue

        progress.achieved = True
        progress.achieved_on_turn = state.turn
        achieved.append(progress)

        milestone = progress.definition
        if milestone.reward == RewardKind.UNLOCK_UPGRADE:
            if milestone.reward_value not in state.unlocked_upgrades:
                state.unlocked_upgrades.append(milestone.reward_value)
        elif milestone.reward == RewardKind.REPUTATION:
            state.player.reputation += milestone.reward_value
        logger.info(f"Milestone achieved on turn {state.turn}: {milestone.name}")

    return achieved


def check_game_over(state: GameState) -> bool:
    """Bankruptcy or destitution ends the game for good."""
    worth = net_worth(state)
    player = state.player

    if player.debt > 0 and (worth <= 0 or player.debt > worth * BANKRUPTCY_MULTIPLIER):
        state.game_over = True
        state.game_over_reason = 'bankruptcy'
    elif (player.balance <= 0
          and inventory_used(player.inventory) == 0
          and max_borrowable(state) <= 0):
        state.game_over = True
        state.game_over_reason = 'destitution'
    else:
        return False

    logger.info(f"Game over on turn {state.turn}: {state.game_over_reason}")
    return True
