"""
Close-able async stream connecting pipeline stages.
"""

import asyncio
from collections import deque
from typing import Any

from .errors import ChannelClosedError


class Channel:
    """
    Unbuffered async channel with explicit close.

    ``send`` returns only once a receiver has taken the item. ``receive``
    blocks while the channel is empty and open. After ``close`` any item
    still in hand is delivered, then every receiver gets end-of-stream
    immediately, so any number of consumers can ``async for`` over it.
    """

    def __init__(self, name: str = "channel"):
        self.name = name
        self._items: deque = deque()
        self._closed = False
        self._sent = 0
        self._received = 0
        self._cond = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, item: Any):
        """Hand an item to a receiver, waiting until one has taken it."""
        async with self._cond:
            await self._cond.wait_for(lambda: not self._items or self._closed)
            if self._closed:
                raise ChannelClosedError(f"send on closed channel: {self.name}")
            self._items.append(item)
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()
            await self._cond.wait_for(lambda: self._received >= ticket)

    async def receive(self) -> Any:
        """
        Take the next item.

        Raises:
            ChannelClosedError: the channel is closed and drained
        """
        async with self._cond:
            await self._cond.wait_for(lambda: self._items or self._closed)
            if not self._items:
                raise ChannelClosedError(f"channel drained: {self.name}")
            item = self._items.popleft()
            self._received += 1
            self._cond.notify_all()
            return item

    async def close(self):
        """Close the channel. Only the last producer may call this, once."""
        async with self._cond:
            if self._closed:
                raise ChannelClosedError(f"close of closed channel: {self.name}")
            self._closed = True
            self._cond.notify_all()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Any:
        try:
            return await self.receive()
        except ChannelClosedError:
            raise StopAsyncIteration
