"""Barrier-synchronized concurrent mounting.

One thread per pair. Every worker parks on a shared barrier before touching
its mount, and the launching thread is the last party, so all mount calls are
released together.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .allocator import MountPair

logger = logging.getLogger(__name__)

MountFn = Callable[[MountPair], int]
ArriveHook = Callable[[MountPair], None]


@dataclass(frozen=True)
class MountOutcome:
    identifier: int
    exit_status: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


def count_failures(outcomes: Iterable[MountOutcome]) -> int:
    return sum(1 for outcome in outcomes if not outcome.ok)


def _join_all(threads: Sequence[threading.Thread]) -> BaseException | None:
    """Join every thread, holding back the first interrupt until all are done.

    A running mount cannot be cancelled, so returning early would let it land
    after teardown has already scanned the mount table.
    """
    interrupt = None
    for thread in threads:
        while True:
            try:
                thread.join()
                break
            except BaseException as exc:
                if interrupt is None:
                    interrupt = exc
    return interrupt


def launch_mounts(
    pairs: Sequence[MountPair],
    mount: MountFn,
    on_arrive: ArriveHook | None = None,
) -> list[MountOutcome]:
    """Mount every pair at once and return one outcome per pair.

    ``mount`` returns the exit status for a pair. A worker never raises: an
    exception from ``mount`` or a broken barrier is recorded as a failed
    outcome with ``exit_status == -1``. There is no timeout on the join.
    """
    barrier = threading.Barrier(len(pairs) + 1)
    slots: list[MountOutcome | None] = [None] * len(pairs)

    def worker(slot: int, pair: MountPair) -> None:
        hook_error = None
        if on_arrive is not None:
            try:
                on_arrive(pair)
            except Exception as exc:
                hook_error = str(exc)
        try:
            barrier.wait()
        except threading.BrokenBarrierError:
            slots[slot] = MountOutcome(pair.identifier, -1, "start barrier broken")
            return
        if hook_error is not None:
            slots[slot] = MountOutcome(pair.identifier, -1, hook_error)
            return
        logger.debug(
            "mounter %d mdir %s mount on cdir %s", pair.identifier, pair.server_dir, pair.client_dir
        )
        try:
            status = mount(pair)
        except Exception as exc:
            slots[slot] = MountOutcome(pair.identifier, -1, str(exc))
            return
        slots[slot] = MountOutcome(pair.identifier, status)

    threads = []
    try:
        for slot, pair in enumerate(pairs):
            logger.debug("Start mounter %d", pair.identifier)
            thread = threading.Thread(
                target=worker,
                args=(slot, pair),
                name=f"mounter-{pair.identifier:04}",
                daemon=True,
            )
            thread.start()
            threads.append(thread)
    except BaseException:
        # Release the workers already parked on the barrier.
        barrier.abort()
        _join_all(threads)
        raise

    interrupt = None
    try:
        barrier.wait()
    except threading.BrokenBarrierError:
        logger.warning("start barrier broken before release")
    except BaseException as exc:
        # Interrupted before release: parked workers must not start mounting.
        barrier.abort()
        interrupt = exc

    joined_interrupt = _join_all(threads)
    if interrupt is None:
        interrupt = joined_interrupt
    if interrupt is not None:
        raise interrupt

    outcomes = []
    for slot, pair in enumerate(pairs):
        outcome = slots[slot]
        if outcome is None:
            outcome = MountOutcome(pair.identifier, -1, "worker exited without a result")
        outcomes.append(outcome)
    return outcomes
