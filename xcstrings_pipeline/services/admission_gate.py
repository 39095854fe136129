"""Admission Gate - FIFO bounded concurrency for asyncio tasks.

A gate admits at most ``capacity`` holders at a time. Callers that arrive
while the gate is full wait in arrival order, and each ``release()`` hands its
slot straight to the longest-waiting caller. The hand-off happens inside
``release()`` itself, so a newcomer calling ``acquire()`` between the release
and the waiter resuming cannot take the freed slot.

All state changes happen synchronously between await points on the event
loop, which makes acquire/release atomic with respect to each other without
any extra lock.

Usage:
    gate = AdmissionGate(5)
    async with gate:
        await do_work()
"""

from __future__ import annotations

import asyncio
from collections import deque


class AdmissionGate:
    def __init__(self, capacity: int, name: str = "gate") -> None:
        if capacity < 1:
            raise ValueError(f"{name} capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._occupancy = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def occupancy(self) -> int:
        return self._occupancy

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    def locked(self) -> bool:
        """True when a new caller would have to wait."""
        return self._occupancy >= self.capacity or bool(self._waiters)

    async def acquire(self) -> None:
        """Wait for a slot, then take it. Never fails, only delays."""
        if not self.locked():
            self._occupancy += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over just before cancellation; pass it on.
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Free a slot, admitting the longest-waiting caller in its place."""
        if self._occupancy <= 0:
            raise RuntimeError(f"{self.name} released more times than acquired")
        self._occupancy -= 1
        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            self._occupancy += 1
            waiter.set_result(None)
            break

    async def __aenter__(self) -> "AdmissionGate":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return (
            f"<AdmissionGate {self.name} {self._occupancy}/{self.capacity} "
            f"waiting={len(self._waiters)}>"
        )
