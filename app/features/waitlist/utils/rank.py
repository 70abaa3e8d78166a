BASE_RANK = 100
PLACES_PER_REFERRAL = 50
TOP_RANK = 1


def calculate_rank(signup_position: int, referral_count: int) -> int:
    """
    Leaderboard rank for a user; lower is better.

    ``signup_position`` is the number of users who signed up strictly before
    this one. Every referral moves the user up ``PLACES_PER_REFERRAL`` places,
    never past ``TOP_RANK``.
    """
    return max(TOP_RANK, BASE_RANK + signup_position - PLACES_PER_REFERRAL * referral_count)
