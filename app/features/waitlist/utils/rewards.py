from typing import NamedTuple, Optional


class RewardTier(NamedTuple):
    max_rank: int
    reward: str

    @property
    def label(self) -> str:
        return f"Top {self.max_rank}"


# Best tier first
REWARD_TIERS = (
    RewardTier(500, "1 year free"),
    RewardTier(1000, "75% off"),
    RewardTier(2000, "50% off"),
    RewardTier(5000, "25% off"),
)


def reward_tier_for_rank(rank: int) -> Optional[RewardTier]:
    """Best tier a user at ``rank`` currently qualifies for, or None past the last tier."""
    for tier in REWARD_TIERS:
        if rank <= tier.max_rank:
            return tier
    return None
