"""Tests for services.event_bus — subscription lifecycle and best-effort delivery."""

from models.events import EventType, ExitPresentation, GoToSlide, SlideChanged
from services.event_bus import close_event_bus, get_event_bus, init_event_bus


async def test_publish_reaches_sync_and_async_handlers(bus):
    seen: list[int] = []

    def on_sync(event):
        seen.append(event.slide_number)

    async def on_async(event):
        seen.append(event.slide_number * 10)

    bus.subscribe(EventType.GO_TO_SLIDE, on_sync)
    bus.subscribe(EventType.GO_TO_SLIDE, on_async)

    delivered = await bus.publish(GoToSlide(conversation_id="c1", slide_number=3))
    assert delivered == 2
    assert sorted(seen) == [3, 30]


async def test_publish_only_to_matching_type(bus):
    seen = []
    bus.subscribe(EventType.EXIT_PRESENTATION, seen.append)
    await bus.publish(GoToSlide(conversation_id="c1", slide_number=2))
    assert seen == []


async def test_failing_handler_does_not_stop_others(bus):
    seen = []

    def broken(event):
        raise ValueError("boom")

    bus.subscribe(EventType.EXIT_PRESENTATION, broken)
    bus.subscribe(EventType.EXIT_PRESENTATION, seen.append)

    delivered = await bus.publish(ExitPresentation(conversation_id="c1"))
    assert delivered == 1
    assert len(seen) == 1


async def test_unsubscribe_is_idempotent(bus):
    seen = []
    unsubscribe = bus.subscribe(EventType.SLIDE_CHANGED, seen.append)
    assert bus.subscriber_count(EventType.SLIDE_CHANGED) == 1

    unsubscribe()
    unsubscribe()
    assert bus.subscriber_count() == 0

    await bus.publish(SlideChanged(conversation_id="c1", slide_number=4))
    assert seen == []


async def test_closed_bus_drops_events(bus):
    seen = []
    bus.subscribe(EventType.EXIT_PRESENTATION, seen.append)
    bus.close()
    assert await bus.publish(ExitPresentation(conversation_id="c1")) == 0
    assert seen == []


def test_singleton_lifecycle():
    first = get_event_bus()
    assert get_event_bus() is first

    second = init_event_bus()
    assert second is not first
    assert get_event_bus() is second

    close_event_bus()
    assert get_event_bus() is not second


def test_event_serializes_camel_case():
    payload = GoToSlide(conversation_id="c1", slide_number=5).model_dump(by_alias=True, mode="json")
    assert payload == {"type": "goToSlide", "conversationId": "c1", "slideNumber": 5}
