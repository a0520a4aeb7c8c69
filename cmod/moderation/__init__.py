"""Report aggregation, threshold decisions and moderation actions."""
