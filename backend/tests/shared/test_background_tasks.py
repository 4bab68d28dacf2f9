import asyncio
import logging

from signal_engine.shared.background import drain_detached_tasks, pending_detached_tasks, spawn_detached


async def test_detached_task_runs_without_being_awaited():
    done = []

    async def work():
        await asyncio.sleep(0)
        done.append(True)

    task = spawn_detached(work(), name="unit-work")
    assert task in pending_detached_tasks()

    await drain_detached_tasks()

    assert done == [True]
    assert task not in pending_detached_tasks()


async def test_detached_failure_is_logged_not_raised(caplog):
    async def boom():
        raise RuntimeError("embedding service down")

    with caplog.at_level(logging.ERROR):
        spawn_detached(boom(), name="unit-boom")
        await drain_detached_tasks()

    assert any("Detached task failed: unit-boom" in r.getMessage() for r in caplog.records)
    assert pending_detached_tasks() == set()


async def test_drain_waits_for_tasks_spawned_while_draining():
    order = []

    async def child():
        order.append("child")

    async def parent():
        order.append("parent")
        spawn_detached(child(), name="unit-child")

    spawn_detached(parent(), name="unit-parent")
    await drain_detached_tasks()

    assert order == ["parent", "child"]
