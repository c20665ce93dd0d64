"""Goal zone classification and progress bar geometry."""

from dataclasses import dataclass
from enum import StrEnum


class Zone(StrEnum):
    """Where net calories sit relative to the goal and RMR."""

    LEFT = "left"
    OVER_GOAL = "over_goal"
    OVER_RMR = "over_rmr"


@dataclass(frozen=True)
class GoalStatus:
    """Zone classification for a day's net calories."""

    goal: int
    calories_left: int
    zone: Zone
    magnitude: int


@dataclass(frozen=True)
class ProgressBar:
    """Segment widths and marker positions as percentages of ``scale``."""

    scale: int
    green_pct: float
    yellow_pct: float
    red_pct: float
    goal_marker_pct: float
    rmr_marker_pct: float


def classify(net_calories: int, rmr: int, deficit: int) -> GoalStatus:
    """Classify net calories into the Left, Over-Goal or Over-RMR zone."""
    goal = rmr - deficit
    calories_left = goal - net_calories
    if net_calories <= goal:
        zone = Zone.LEFT
    elif net_calories <= rmr:
        zone = Zone.OVER_GOAL
    else:
        zone = Zone.OVER_RMR
    magnitude = calories_left if zone is Zone.LEFT else abs(calories_left)
    return GoalStatus(
        goal=goal, calories_left=calories_left, zone=zone, magnitude=magnitude
    )


def progress_bar(net_calories: int, rmr: int, goal: int) -> ProgressBar:
    """Map net calories onto a bar that grows past RMR to fit the total."""
    scale = max(rmr, net_calories)
    if scale < 1:
        scale = 1
    green = max(0, min(net_calories, goal))
    yellow = max(0, min(net_calories, rmr) - goal)
    red = max(0, net_calories - rmr)
    return ProgressBar(
        scale=scale,
        green_pct=_pct(green, scale),
        yellow_pct=_pct(yellow, scale),
        red_pct=_pct(red, scale),
        goal_marker_pct=_pct(goal, scale),
        rmr_marker_pct=_pct(rmr, scale),
    )


def _pct(value: int, scale: int) -> float:
    return value / scale * 100
