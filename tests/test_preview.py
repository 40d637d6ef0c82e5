import asyncio

from cardstamp.preview import RenderGenerations


def test_stale_render_result_is_dropped() -> None:
    async def scenario():
        generations = RenderGenerations()
        release = asyncio.Event()

        async def slow_render() -> str:
            await release.wait()
            return "old"

        async def fast_render() -> str:
            return "new"

        first = asyncio.create_task(generations.run(slow_render))
        await asyncio.sleep(0)
        second = await generations.run(fast_render)
        release.set()
        return await first, second, generations.current

    assert asyncio.run(scenario()) == (None, "new", 2)


def test_latest_generation_is_current() -> None:
    generations = RenderGenerations()
    first = generations.begin()
    assert generations.is_current(first)
    second = generations.begin()
    assert not generations.is_current(first)
    assert generations.is_current(second)
