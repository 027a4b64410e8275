from __future__ import annotations

import asyncio

from core.services.notifications import Notifier


def test_notification_auto_dismisses():
    async def scenario():
        notifier = Notifier(dismiss_after=0.05)
        notifier.show("Libro agregado exitosamente")
        assert notifier.current.message == "Libro agregado exitosamente"
        await asyncio.sleep(0.1)
        return notifier.current

    assert asyncio.run(scenario()) is None


def test_new_notification_restarts_the_timer():
    async def scenario():
        notifier = Notifier(dismiss_after=0.2)
        notifier.show("first")
        await asyncio.sleep(0.12)
        notifier.show("second", "error")
        await asyncio.sleep(0.12)
        # the first timer would have fired by now
        still_visible = notifier.current
        await asyncio.sleep(0.15)
        return still_visible, notifier.current

    still_visible, finally_visible = asyncio.run(scenario())

    assert still_visible.message == "second"
    assert still_visible.kind == "error"
    assert finally_visible is None


def test_dismiss_cancels_pending_timer():
    async def scenario():
        notifier = Notifier(dismiss_after=0.05)
        notifier.show("first")
        notifier.dismiss()
        notifier.show("second")
        notifier.dismiss()
        return notifier.current, notifier._timer

    current, timer = asyncio.run(scenario())

    assert current is None
    assert timer is None


def test_listeners_receive_each_notification():
    seen = []
    notifier = Notifier()
    notifier.subscribe(lambda n: seen.append((n.kind, n.message)))

    # outside an event loop there is no timer, the notification just stays
    notifier.show("hola")
    notifier.show("adiós", "error")

    assert seen == [("success", "hola"), ("error", "adiós")]
    assert notifier.current.message == "adiós"
