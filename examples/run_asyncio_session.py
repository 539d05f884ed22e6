"""Drive a memorization session from an asyncio event loop."""

from __future__ import annotations

import asyncio

from breathe_memorizer import AsyncioScheduler, SessionEvent, begin_session


async def main() -> None:
    session = begin_session(
        "Problem. Action. Result. That is how I answer.",
        title="Tell me about a win",
        scheduler=AsyncioScheduler(),
    )

    def on_event(event: SessionEvent, current) -> None:
        if event is SessionEvent.PEEK:
            print("peek ->", [current.word_state(r).value for r in range(3)])
        elif event is SessionEvent.TIMER_STOPPED:
            print("timer stopped at", current.formatted_elapsed)

    session.subscribe(on_event)
    session.toggle_timer()
    for _ in range(3):
        session.advance()
    session.peek(1)
    await asyncio.sleep(1.7)
    result = session.toggle_timer()
    print(result)
    session.end_session()


if __name__ == "__main__":
    asyncio.run(main())
