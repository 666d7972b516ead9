"""gitpromote resource clients."""

from gitpromote.clients.pulls import PullsClient
from gitpromote.clients.repos import ReposClient
from gitpromote.clients.statuses import StatusesClient

__all__ = [
    "ReposClient",
    "PullsClient",
    "StatusesClient",
]
