import asyncio

import pytest

from healthping.common.exceptions import ReceiveError, SendError
from healthping.common.stop_signal import StopSignal
from healthping.services.listener.channel import CommandChannel
from healthping.services.listener.commands import Command, DispatcherState
from healthping.services.listener.dispatcher import CommandDispatcher

from conftest import RecordingTerminate

SENDER = ("127.0.0.1", 40000)


class FakeChannel:
    """Replays canned commands, then fails like a broken socket"""

    def __init__(self, texts=(), fail_reply=False):
        self._commands = [Command.from_text(t, SENDER) for t in texts]
        self.replies = []
        self.fail_reply = fail_reply

    async def receive(self) -> Command:
        if not self._commands:
            raise ReceiveError("no more datagrams")
        return self._commands.pop(0)

    async def reply(self, sender, text) -> None:
        if self.fail_reply:
            raise SendError("network unreachable", address=sender)
        self.replies.append((sender, text))


def test_exit_acknowledges_then_terminates():
    channel = FakeChannel(["EXIT now"])
    replies_at_exit = []
    terminate = RecordingTerminate(on_call=lambda: replies_at_exit.append(len(channel.replies)))
    dispatcher = CommandDispatcher(channel, StopSignal(), terminate=terminate)

    asyncio.run(dispatcher.run())

    assert channel.replies == [(SENDER, "ACK: EXIT now\n")]
    assert replies_at_exit == [1]
    assert terminate.codes == [0]
    assert dispatcher.state is DispatcherState.TERMINATED


def test_exit_send_failure_is_fatal_without_terminating(terminate):
    channel = FakeChannel(["EXIT"], fail_reply=True)
    dispatcher = CommandDispatcher(channel, StopSignal(), terminate=terminate)

    with pytest.raises(SendError):
        asyncio.run(dispatcher.run())

    assert terminate.codes == []
    assert dispatcher.state is DispatcherState.RUNNING


def test_unhealthy_fires_stop_signal_without_reply(terminate):
    stop = StopSignal()
    channel = FakeChannel()
    dispatcher = CommandDispatcher(channel, stop, terminate=terminate)

    asyncio.run(dispatcher.dispatch(Command.from_text("UNHEALTHY", SENDER)))

    assert stop.is_fired
    assert channel.replies == []
    assert terminate.codes == []
    assert dispatcher.state is DispatcherState.RUNNING


def test_repeated_unhealthy_is_idempotent(terminate):
    stop = StopSignal()
    channel = FakeChannel(["UNHEALTHY", "UNHEALTHY"])
    dispatcher = CommandDispatcher(channel, stop, terminate=terminate)

    # Loop keeps serving until the fake channel runs dry
    with pytest.raises(ReceiveError):
        asyncio.run(dispatcher.run())

    assert stop.is_fired
    assert channel.replies == []
    assert terminate.codes == []
    assert dispatcher.commands_received == 2


@pytest.mark.parametrize("text", ["", "PING", "exit now", "unhealthy", "HELLO EXIT"])
def test_unrecognized_commands_are_ignored(terminate, text):
    stop = StopSignal()
    channel = FakeChannel([text])
    dispatcher = CommandDispatcher(channel, stop, terminate=terminate)

    with pytest.raises(ReceiveError):
        asyncio.run(dispatcher.run())

    assert not stop.is_fired
    assert channel.replies == []
    assert terminate.codes == []
    assert dispatcher.state is DispatcherState.RUNNING


def test_keeps_serving_after_unhealthy_and_noise(terminate):
    stop = StopSignal()
    channel = FakeChannel(["UNHEALTHY", "", "PING", "UNHEALTHY", "EXIT bye"])
    dispatcher = CommandDispatcher(channel, stop, terminate=terminate)

    asyncio.run(dispatcher.run())

    assert stop.is_fired
    assert channel.replies == [(SENDER, "ACK: EXIT bye\n")]
    assert terminate.codes == [0]
    assert dispatcher.commands_received == 5


def test_exit_over_real_socket(terminate, udp_client):
    async def scenario():
        channel = CommandChannel(0, host="127.0.0.1")
        channel.open()
        dispatcher = CommandDispatcher(channel, StopSignal(), terminate=terminate)
        try:
            task = asyncio.create_task(dispatcher.run())
            udp_client.sendto(b"EXIT now\n", ("127.0.0.1", channel.bound_port))
            await asyncio.wait_for(task, timeout=2.0)
        finally:
            channel.close()

    asyncio.run(scenario())

    data, _ = udp_client.recvfrom(1024)
    assert data == b"ACK: EXIT now\n"
    assert terminate.codes == [0]
