"""
Prize ranks for Lotto 6/45.

Rank is ordered best to worst: FIRST < SECOND < THIRD < FOURTH < FIFTH < NONE.
"""
from enum import IntEnum

from scipy.special import comb

from lotto645.config import MAX_NUMBER, NUMBERS_PER_DRAW


class Rank(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    NONE = 6

    @property
    def is_win(self):
        return self is not Rank.NONE

    @property
    def label(self):
        return "No prize" if self is Rank.NONE else f"{self.name.title()} prize"

    @classmethod
    def determine_rank(cls, predicted, actual):
        """
        Rank a predicted set of numbers against an actual draw.

        5 main matches are split into SECOND/THIRD by the bonus number;
        every other rank depends on the main match count alone.
        """
        predicted = set(predicted)
        match_count = len(predicted & actual.main_numbers)
        bonus_hit = actual.bonus_number in predicted

        if match_count == 6:
            return cls.FIRST
        elif match_count == 5 and bonus_hit:
            return cls.SECOND
        elif match_count == 5:
            return cls.THIRD
        elif match_count == 4:
            return cls.FOURTH
        elif match_count == 3:
            return cls.FIFTH
        return cls.NONE


def random_ticket_odds():
    """
    Probability that a uniformly random 6-number ticket lands each Rank.

    Baseline against which backtest ranks can be read.
    """
    total = comb(MAX_NUMBER, NUMBERS_PER_DRAW, exact=True)
    others = MAX_NUMBER - NUMBERS_PER_DRAW          # 39 non-main numbers, bonus included
    non_bonus = others - 1                          # 38
    counts = {
        Rank.FIRST: 1,
        Rank.SECOND: comb(6, 5, exact=True),
        Rank.THIRD: comb(6, 5, exact=True) * non_bonus,
        Rank.FOURTH: comb(6, 4, exact=True) * comb(others, 2, exact=True),
        Rank.FIFTH: comb(6, 3, exact=True) * comb(others, 3, exact=True),
    }
    odds = {rank: count / total for rank, count in counts.items()}
    odds[Rank.NONE] = 1.0 - sum(odds.values())
    return odds
