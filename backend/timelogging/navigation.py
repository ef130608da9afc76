# backend/timelogging/navigation.py
"""In-memory router and the unsaved-changes guard that sits in front of it."""
import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class Router:
    location: str = "/"
    history: list = field(default_factory=list)

    def go(self, target):
        self.history.append(self.location)
        self.location = target

    def back(self):
        if self.history:
            self.location = self.history.pop()
        return self.location


@dataclass
class NavigationPrompt:
    target: str
    pending_count: int
    error: str = ""


class NavigationGuard:
    """
    Blocks navigation while the ledger has unsaved changes and offers
    save / discard / cancel. A failed save keeps the prompt open.
    """

    def __init__(self, ledger, router: Router):
        self.ledger = ledger
        self.router = router
        self.prompt: Optional[NavigationPrompt] = None

    @property
    def is_blocked(self) -> bool:
        return self.prompt is not None

    async def navigate(self, target) -> bool:
        """True if navigation happened, False if a prompt was opened instead."""
        if not self.ledger.has_unsaved_changes:
            await self._leave(target)
            return True
        self.prompt = NavigationPrompt(target=target, pending_count=self.ledger.pending_count)
        logger.debug("Navigation to %s blocked by %d unsaved changes", target, self.ledger.pending_count)
        return False

    async def save_and_continue(self) -> bool:
        if self.prompt is None:
            return False
        ok = await self.ledger.save_all_changes()
        if not ok or self.ledger.has_unsaved_changes:
            self.prompt.error = "Some changes failed to save. Please try again."
            return False
        await self._leave(self.prompt.target)
        return True

    async def discard_and_continue(self) -> bool:
        if self.prompt is None:
            return False
        self.ledger.discard_all_changes()
        await self._leave(self.prompt.target)
        return True

    def cancel(self):
        self.prompt = None

    async def _leave(self, target):
        self.ledger.freeze()
        await self.ledger.wait_idle()
        self.prompt = None
        self.router.go(target)
