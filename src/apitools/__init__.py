"""
apitools - small backend services for email relay and GitLab reporting.

An HTTP API (FastAPI) that sends email through a local SMTP sender or an
RPC mail tier, aggregates a user's GitLab commits across projects, and
computes an average time of day from timestamps.
"""

__version__ = "1.2.0"
