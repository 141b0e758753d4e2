"""Creator program rules and fixed reference values."""

from datetime import timedelta

# Follower threshold (highest single platform) to apply and to stay in good standing
FOLLOWER_THRESHOLD = 500
GRACE_PERIOD_DAYS = 30
GRACE_PERIOD_LENGTH = timedelta(days=GRACE_PERIOD_DAYS)
GRACE_REMINDER_WINDOW = timedelta(hours=24)
MANUAL_SYNC_INTERVAL = timedelta(hours=24)

# Application content limits
DISPLAY_NAME_MIN_LENGTH = 2
DISPLAY_NAME_MAX_LENGTH = 50
DESCRIPTION_MIN_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 1000
BIO_MIN_LENGTH = 20
BIO_MAX_LENGTH = 500
MAX_PLATFORMS = 5

PRIMARY_PLATFORMS = frozenset({"twitch", "youtube", "tiktok", "other"})

# Subscription plans
PROGRAM_PLAN = "base"
ENTITLEMENT_SOURCE = "content_creator_program"
SUBSCRIPTION_ID_PREFIX = "cc_program_"
HIGHER_TIER_PLANS = frozenset({"premium", "premium_plus", "enterprise"})
REVERTABLE_PLANS = frozenset({"", "base", "free"})

# Estimated value of one Base Plan entitlement, for analytics
BASE_PLAN_MONTHLY_PRICE = 3.0
BASE_PLAN_YEARLY_PRICE = 36.0

# Revocation / removal reasons
VOLUNTARY_REMOVAL_REASON = "voluntary"
VOLUNTARY_REVOKE_REASON = "creator_voluntary_removal"
GRACE_EXPIRED_REMOVAL_REASON = (
    f"Follower count remained below {FOLLOWER_THRESHOLD} for {GRACE_PERIOD_DAYS} days"
)
REMOVAL_REVOKE_REASON_PREFIX = "Creator removed from program: "

LOW_FOLLOWER_WARNING_MESSAGE = (
    f"Your highest follower count is below our minimum requirement of {FOLLOWER_THRESHOLD}. "
    f"You have {GRACE_PERIOD_DAYS} days to increase your followers or your creator account "
    "will be removed."
)

THEME_PALETTE = (
    "#fbbf24",
    "#f59e0b",
    "#ef4444",
    "#ec4899",
    "#a855f7",
    "#8b5cf6",
    "#6366f1",
    "#3b82f6",
    "#0ea5e9",
    "#06b6d4",
    "#14b8a6",
    "#10b981",
    "#22c55e",
    "#84cc16",
)
THEME_MIN_LUMINANCE = 0.15
THEME_MAX_LUMINANCE = 0.85

# Scheduler lock names
SYNC_ALL_LOCK_NAME = "creator_sync_all"
