"""CMod — content moderation pipeline.

Classifies submitted content, aggregates community reports and applies
threshold-based moderation actions (warn / delete) with an audit trail.
"""

__version__ = "0.1.0"
