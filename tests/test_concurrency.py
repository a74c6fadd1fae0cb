# tests/test_concurrency.py

from __future__ import annotations

import threading

from taskpilot.core.errors import Err, ErrorCode, Ok
from taskpilot.tasks.task_models import TaskStatus

OWNER = "u1"


def test_concurrent_starts_leave_exactly_one_running_task(state) -> None:
    n = 8
    tasks = [
        state.task_store.create(owner_id=OWNER, name=f"t{i}", now_ts=state.clock.now())
        for i in range(n)
    ]
    barrier = threading.Barrier(n)
    results: list = [None] * n

    def worker(i: int) -> None:
        barrier.wait()
        results[i] = state.engine.start(OWNER, tasks[i].id)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    winners = [r for r in results if isinstance(r, Ok)]
    losers = [r for r in results if isinstance(r, Err)]

    assert len(winners) == 1
    assert len(losers) == n - 1
    assert all(r.code == ErrorCode.ANOTHER_TASK_ACTIVE for r in losers)

    winner = winners[0].value
    assert state.queries.active_task(OWNER).id == winner.id

    running = [
        t for t in (state.task_store.find_by_id(x.id) for x in tasks) if t.status == TaskStatus.IN_PROGRESS
    ]
    assert [t.id for t in running] == [winner.id]

    # Only the winner got a ledger entry.
    assert sum(len(state.ledger.events(t.id)) for t in tasks) == 1
