# -*- coding: utf-8 -*-
"""Reveal / blur progression of the player-of-the-day photo."""


def reveal_percent(wrong_attempts: int, max_wrong_attempts: int, *, finished: bool = False) -> int:
    """
    Linear in wrong attempts, capped at 100. Non-decreasing for a growing
    ``wrong_attempts``; a finished game is always fully revealed.
    """
    if finished:
        return 100
    wrong = max(0, wrong_attempts)
    return min(100, wrong * 100 // max_wrong_attempts)


def blur_percent(wrong_attempts: int, max_wrong_attempts: int, *, finished: bool = False) -> int:
    return 100 - reveal_percent(wrong_attempts, max_wrong_attempts, finished=finished)


def attempts_left(wrong_attempts: int, max_wrong_attempts: int) -> int:
    return max(0, max_wrong_attempts - wrong_attempts)
