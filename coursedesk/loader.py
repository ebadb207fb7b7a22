import logging
from collections.abc import Awaitable, Callable
from typing import Any

from coursedesk.exceptions import DashboardError
from coursedesk.filters import Record
from coursedesk.table_view import TableView

logger = logging.getLogger(__name__)


class DataLoader:
    """Fetches a full list for one view and stores it as the raw list."""

    def __init__(
        self,
        view: TableView,
        fetch: Callable[[], Awaitable[list[Any]]],
        transform: Callable[[Any], Record] | None = None,
    ):
        self.view = view
        self.fetch = fetch
        self.transform = transform

    async def load(self) -> bool:
        """
        Returns True when the response was applied. Failures are logged and
        leave the current list as it was; a response that arrives after a
        newer load (or after the view closed) is dropped.
        """
        token = self.view.begin_load()
        self.view.loading = True
        try:
            payload = await self.fetch()
            if not isinstance(payload, list):
                raise TypeError(f"expected a list, got {type(payload).__name__}")
            records = [self.transform(item) for item in payload] if self.transform else list(payload)
        except DashboardError as exc:
            logger.warning("Failed to load %s: %s", self.view.name, exc)
            return False
        except (KeyError, TypeError, ValueError):
            logger.exception("Malformed %s payload", self.view.name)
            return False
        finally:
            if not token.cancelled:
                self.view.loading = False

        applied = self.view.finish_load(token, records)
        if applied:
            logger.info("Loaded %d %s", len(records), self.view.name)
        else:
            logger.debug("Discarded stale %s response", self.view.name)
        return applied
