"""Dispatch engine for ordered, asynchronous message delivery.

Every submitted message goes through the same pipeline: colour code
translation, placeholder expansion, rendering into lines, recipient
filtering and delivery. A single worker task consumes the requests in
submission order, so the side effects of two dispatches never interleave.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import TracebackType
from typing import TYPE_CHECKING

from auction_messaging.config import Settings, get_settings
from auction_messaging.dispatcher.filter import RecipientFilter
from auction_messaging.dispatcher.recipients import RecipientRegistry
from auction_messaging.formatter.placeholders import PlaceholderExpander
from auction_messaging.renderer.colors import translate_color_codes
from auction_messaging.renderer.renderer import MessageRenderer

if TYPE_CHECKING:
    from auction_messaging.dispatcher.recipients import Recipient, RecipientGroup
    from auction_messaging.dispatcher.sinks import ChatSink
    from auction_messaging.models import AuctionContext, Message
    from auction_messaging.renderer.models import RenderedLine

logger = logging.getLogger(__name__)


class DispatchEngineError(Exception):
    """Base exception for dispatch engine errors."""

    pass


class DispatchQueueFullError(DispatchEngineError):
    """Raised when a bounded dispatch queue cannot take another request."""

    pass


class EngineState(Enum):
    """Lifecycle state of the dispatch engine."""

    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass
class DispatchResult:
    """Outcome of one dispatch request.

    Per-recipient failures are logged and counted here but never raised;
    the future of a request only fails when the message itself could not
    be prepared.
    """

    lines: int = 0
    delivered: int = 0
    suppressed: int = 0
    failed: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def all_delivered(self) -> bool:
        """Return True if no delivery failed."""
        return self.failed == 0


@dataclass
class DispatchRequest:
    """A queued dispatch. ``recipient`` is None for broadcasts."""

    message: Message
    auction: AuctionContext | None
    recipient: Recipient | None
    future: asyncio.Future[DispatchResult]

    @property
    def is_broadcast(self) -> bool:
        return self.recipient is None


class DispatchEngine:
    """Single-worker engine delivering messages to recipients.

    ``submit`` and ``submit_broadcast`` must be called on the engine's event
    loop; they return immediately with a future resolved once the message
    has been delivered. ``submit_threadsafe`` and
    ``submit_broadcast_threadsafe`` may be called from any thread.

    Example:
        ```python
        engine = DispatchEngine(sink, ConsoleRecipient())
        engine.add_recipient_group(players)

        async with engine:
            result = await engine.submit_broadcast(
                Message("&6[ownername] is auctioning [item]"), auction
            )
        ```
    """

    def __init__(
        self,
        sink: ChatSink,
        console: Recipient,
        *,
        registry: RecipientRegistry | None = None,
        expander: PlaceholderExpander | None = None,
        renderer: MessageRenderer | None = None,
        recipient_filter: RecipientFilter | None = None,
        settings_provider: Callable[[], Settings] = get_settings,
        queue_maxsize: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            sink: Host chat delivery sink.
            console: Recipient that receives every broadcast unfiltered.
            registry: Recipient group registry (a new empty one by default).
            expander: Placeholder expander.
            renderer: Message renderer.
            recipient_filter: Filter applied to interactive recipients.
            settings_provider: Callable returning the current settings.
            queue_maxsize: Maximum pending requests (default: from settings,
                0 means unbounded).
        """
        self._sink = sink
        self._console = console
        self._registry = registry if registry is not None else RecipientRegistry()
        self._expander = expander or PlaceholderExpander(settings_provider)
        self._renderer = renderer or MessageRenderer(settings_provider)
        self._filter = recipient_filter or RecipientFilter()
        self._settings_provider = settings_provider
        self._queue_maxsize = queue_maxsize

        self._state = EngineState.STOPPED
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[DispatchRequest] | None = None
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> EngineState:
        """Current engine state."""
        return self._state

    @property
    def registry(self) -> RecipientRegistry:
        """Recipient group registry used for broadcasts."""
        return self._registry

    @property
    def pending(self) -> int:
        """Number of requests waiting for the worker."""
        return self._queue.qsize() if self._queue is not None else 0

    def add_recipient_group(self, group: RecipientGroup) -> bool:
        """Register a broadcast group. Safe to call from any thread."""
        return self._registry.add_group(group)

    def remove_recipient_group(self, group: RecipientGroup) -> bool:
        """Unregister a broadcast group. Safe to call from any thread."""
        return self._registry.remove_group(group)

    async def start(self) -> None:
        """Start the background worker."""
        if self._state != EngineState.STOPPED:
            logger.warning(f"Cannot start dispatch engine: already in state {self._state}")
            return

        maxsize = self._queue_maxsize
        if maxsize is None:
            maxsize = self._settings_provider().queue_maxsize

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=maxsize)
        self._worker_task = asyncio.create_task(self._worker_loop())
        self._state = EngineState.RUNNING
        logger.info("Dispatch engine started")

    async def stop(self, *, drain: bool = True) -> None:
        """Stop the background worker.

        Args:
            drain: Deliver every queued request before stopping. Otherwise
                pending requests are cancelled.
        """
        if self._state != EngineState.RUNNING:
            return

        self._state = EngineState.STOPPING

        if drain and self._queue is not None:
            await self._queue.join()

        if self._worker_task:
            self._worker_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker_task
            self._worker_task = None

        if self._queue is not None:
            while not self._queue.empty():
                request = self._queue.get_nowait()
                request.future.cancel()
            self._queue = None

        self._state = EngineState.STOPPED
        logger.info("Dispatch engine stopped")

    async def __aenter__(self) -> DispatchEngine:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()

    def submit(
        self,
        recipient: Recipient,
        message: Message,
        auction: AuctionContext | None = None,
    ) -> asyncio.Future[DispatchResult]:
        """Queue a message for a single recipient.

        Args:
            recipient: Recipient of the message.
            message: Message template and flags.
            auction: Auction used to fill placeholders, if any.

        Returns:
            Future resolved with the DispatchResult once delivered.

        Raises:
            DispatchEngineError: If the engine is not running.
            DispatchQueueFullError: If the bounded queue is full.
        """
        return self._enqueue(message, auction, recipient)

    def submit_broadcast(
        self,
        message: Message,
        auction: AuctionContext | None = None,
    ) -> asyncio.Future[DispatchResult]:
        """Queue a message for every registered group and the console.

        Args:
            message: Message template and flags.
            auction: Auction used to fill placeholders, if any.

        Returns:
            Future resolved with the DispatchResult once delivered.

        Raises:
            DispatchEngineError: If the engine is not running.
            DispatchQueueFullError: If the bounded queue is full.
        """
        return self._enqueue(message, auction, None)

    def submit_threadsafe(
        self,
        recipient: Recipient,
        message: Message,
        auction: AuctionContext | None = None,
    ) -> concurrent.futures.Future[DispatchResult]:
        """Queue a message for a single recipient from any thread."""
        loop = self._require_loop()
        return asyncio.run_coroutine_threadsafe(
            self._enqueue_and_wait(message, auction, recipient), loop
        )

    def submit_broadcast_threadsafe(
        self,
        message: Message,
        auction: AuctionContext | None = None,
    ) -> concurrent.futures.Future[DispatchResult]:
        """Queue a broadcast from any thread."""
        loop = self._require_loop()
        return asyncio.run_coroutine_threadsafe(
            self._enqueue_and_wait(message, auction, None), loop
        )

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if self._state != EngineState.RUNNING or self._loop is None:
            raise DispatchEngineError("Dispatch engine is not running")
        return self._loop

    def _enqueue(
        self,
        message: Message,
        auction: AuctionContext | None,
        recipient: Recipient | None,
    ) -> asyncio.Future[DispatchResult]:
        """Put a request on the queue without blocking."""
        loop = self._require_loop()
        if self._queue is None:
            raise DispatchEngineError("Dispatch engine is not running")

        request = DispatchRequest(
            message=message,
            auction=auction,
            recipient=recipient,
            future=loop.create_future(),
        )
        try:
            self._queue.put_nowait(request)
        except asyncio.QueueFull as e:
            raise DispatchQueueFullError(
                f"Dispatch queue is full ({self._queue.maxsize} pending)"
            ) from e
        return request.future

    async def _enqueue_and_wait(
        self,
        message: Message,
        auction: AuctionContext | None,
        recipient: Recipient | None,
    ) -> DispatchResult:
        return await self._enqueue(message, auction, recipient)

    async def _worker_loop(self) -> None:
        """Process queued requests one at a time, in order."""
        assert self._queue is not None
        queue = self._queue

        while True:
            request = await queue.get()
            try:
                if request.future.cancelled():
                    continue
                result = await self._process(request)
                if not request.future.done():
                    request.future.set_result(result)
            except asyncio.CancelledError:
                if not request.future.done():
                    request.future.cancel()
                raise
            except Exception as e:
                logger.error(f"Dispatch failed: {e}", exc_info=True)
                if not request.future.done():
                    request.future.set_exception(e)
            finally:
                queue.task_done()

    def _prepare(self, request: DispatchRequest) -> list[RenderedLine]:
        """Translate colours, expand placeholders and render the message."""
        settings = self._settings_provider()
        colored = translate_color_codes(request.message.text, settings.color_char)
        expanded = self._expander.expand(colored, request.auction)
        return self._renderer.render(expanded, request.auction)

    async def _process(self, request: DispatchRequest) -> DispatchResult:
        """Run the full pipeline for one request."""
        # Rendering may call into a slow host serializer
        lines = await asyncio.to_thread(self._prepare, request)
        result = DispatchResult(lines=len(lines))

        for line in lines:
            if request.recipient is not None:
                await self._deliver_if_applicable(request.recipient, line, request.message, result)
                continue

            for recipient in self._registry.recipients():
                await self._deliver_if_applicable(recipient, line, request.message, result)
            await self._deliver(self._console, line, result)

        kind = "Broadcast" if request.is_broadcast else "Dispatch"
        logger.debug(
            f"{kind} complete: {result.delivered} delivered, "
            f"{result.suppressed} suppressed, {result.failed} failed"
        )
        return result

    async def _deliver_if_applicable(
        self,
        recipient: Recipient,
        line: RenderedLine,
        message: Message,
        result: DispatchResult,
    ) -> None:
        """Deliver a line unless the recipient ignores the message."""
        try:
            allowed = self._filter.may_deliver(recipient, message)
        except Exception as e:
            logger.warning(f"Error reading preferences of {recipient.name}: {e}")
            result.failed += 1
            return

        if not allowed:
            result.suppressed += 1
            return
        await self._deliver(recipient, line, result)

    async def _deliver(
        self, recipient: Recipient, line: RenderedLine, result: DispatchResult
    ) -> None:
        """Deliver a line to one recipient, recording the outcome."""
        try:
            success = await self._sink.deliver(recipient, line)
        except Exception as e:
            logger.warning(f"Error delivering to {recipient.name}: {e}")
            success = False

        if success:
            result.delivered += 1
        else:
            result.failed += 1
