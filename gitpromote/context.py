"""
Promotion context.

Everything a promotion needs from its surroundings, passed explicitly to the
coordinator and the merge watcher.
"""

import logging
from dataclasses import dataclass, field

from gitpromote.clock import Clock, SystemClock
from gitpromote.config import PromotionSettings
from gitpromote.git import GitCLI, Gitter
from gitpromote.logging import get_logger
from gitpromote.providers import GitProvider


@dataclass
class PromotionContext:
    """
    Collaborators and settings for one promotion.

    A context is not shared between concurrent promotions against the same
    environment repository; callers serialise those themselves.

    Example:
        ```python
        from gitpromote.client import GitHubProvider
        from gitpromote.config import PromotionSettings
        from gitpromote.context import PromotionContext

        context = PromotionContext(
            provider=GitHubProvider.from_env(),
            settings=PromotionSettings.from_env(),
        )
        ```
    """

    provider: GitProvider
    gitter: Gitter = field(default_factory=GitCLI)
    settings: PromotionSettings = field(default_factory=PromotionSettings)
    clock: Clock = field(default_factory=SystemClock)
    logger: logging.Logger = field(default_factory=get_logger)
