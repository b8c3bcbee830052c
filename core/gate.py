"""Animation gate - per-channel mutual exclusion for timed UI effects."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from itertools import count
from typing import AsyncIterator

from core.errors import Busy
from core.logging_utils import get_logger

logger = get_logger(__name__)

_token_ids = count(1)


@dataclass(eq=False)
class GateToken:
    """Proof of holding a gate channel."""

    channel: str
    token_id: int = field(default_factory=lambda: next(_token_ids))
    cancelled: bool = False
    released: bool = False
    _timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        """Check if the token still holds its channel."""
        return not (self.cancelled or self.released)


class AnimationGate:
    """
    Serializes operations that drive a user-visible effect.

    A channel is either free or held by exactly one token. A second
    ``acquire`` on a held channel fails immediately with ``Busy``; nothing
    is ever queued.
    """

    def __init__(self) -> None:
        """Initialize a gate with every channel free."""
        self._holders: dict[str, GateToken] = {}

    def acquire(self, channel: str) -> GateToken:
        """
        Take ``channel``.

        Raises:
            Busy: If the channel is already held
        """
        holder = self._holders.get(channel)
        if holder is not None:
            raise Busy(f"Channel {channel!r} is held by token {holder.token_id}")
        token = GateToken(channel)
        self._holders[channel] = token
        logger.debug("Gate %r acquired by token %d", channel, token.token_id)
        return token

    def release(self, token: GateToken) -> None:
        """
        Free the token's channel.

        Releasing a token that no longer holds its channel (already released,
        cancelled, or timed out) is a no-op.
        """
        if token._timer is not None:
            token._timer.cancel()
            token._timer = None
        if self._holders.get(token.channel) is not token:
            logger.debug("Gate %r: token %d is stale", token.channel, token.token_id)
            return
        del self._holders[token.channel]
        token.released = True
        logger.debug("Gate %r released by token %d", token.channel, token.token_id)

    def acquire_for(self, channel: str, duration: float) -> GateToken:
        """
        Take ``channel`` and release it automatically after ``duration`` seconds.

        Must be called from inside a running event loop.
        """
        if duration <= 0:
            raise ValueError("Duration must be positive")
        loop = asyncio.get_running_loop()
        token = self.acquire(channel)
        token._timer = loop.call_later(duration, self.release, token)
        return token

    @asynccontextmanager
    async def hold(self, channel: str) -> AsyncIterator[GateToken]:
        """Hold ``channel`` for the duration of the block, releasing on every exit."""
        token = self.acquire(channel)
        try:
            yield token
        finally:
            self.release(token)

    def cancel(self, channel: str) -> GateToken | None:
        """
        Invalidate whatever currently holds ``channel`` and free it.

        The cancelled token's owner sees ``token.cancelled`` and must not
        commit its pending step.

        Returns:
            The cancelled token, or None if the channel was free
        """
        token = self._holders.pop(channel, None)
        if token is None:
            return None
        token.cancelled = True
        if token._timer is not None:
            token._timer.cancel()
            token._timer = None
        logger.info("Gate %r: cancelled token %d", channel, token.token_id)
        return token

    def is_held(self, channel: str) -> bool:
        """Check if ``channel`` is currently held."""
        return channel in self._holders

    @property
    def held_channels(self) -> list[str]:
        """Return the channels currently held."""
        return list(self._holders)
