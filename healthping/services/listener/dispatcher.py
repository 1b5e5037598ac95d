"""
Command Dispatcher

The control loop. Reads commands from the channel and acts on them:

- EXIT: acknowledge to the sender, then terminate with status 0
- UNHEALTHY: fire the stop signal so the heartbeat stops (no reply)
- anything else: ignored

There is no error branch for unknown verbs; the protocol tolerates
them. Channel errors propagate and are fatal.
"""

import logging
import sys
from typing import Callable

from healthping.common.logging_setup import get_service_logger, log_command
from healthping.common.stop_signal import StopSignal

from .channel import CommandChannel
from .commands import Command, DispatcherState, Verb

logger = get_service_logger("listener.dispatcher")


class CommandDispatcher:
    """Two-state control loop: RUNNING until an EXIT command"""

    def __init__(
        self,
        channel: CommandChannel,
        stop_signal: StopSignal,
        terminate: Callable[[int], None] = sys.exit,
    ):
        self.channel = channel
        self.stop_signal = stop_signal
        self._terminate = terminate

        self.state = DispatcherState.RUNNING
        self.commands_received = 0

    async def run(self) -> None:
        """Serve commands until terminated"""
        while self.state is DispatcherState.RUNNING:
            command = await self.channel.receive()
            await self.dispatch(command)

    async def dispatch(self, command: Command) -> None:
        """Act on a single command"""
        self.commands_received += 1

        verb = command.known_verb
        if verb is Verb.EXIT:
            await self._handle_exit(command)
        elif verb is Verb.UNHEALTHY:
            self._handle_unhealthy(command)
        else:
            log_command(logger, command, "Ignored command", level=logging.DEBUG)

    async def _handle_exit(self, command: Command) -> None:
        # Ack first; a failed send raises before we get to terminate
        await self.channel.reply(command.sender, f"ACK: {command.raw_text}\n")
        log_command(logger, command, "Received EXIT command. Exiting")

        self.state = DispatcherState.TERMINATED
        self._terminate(0)

    def _handle_unhealthy(self, command: Command) -> None:
        if self.stop_signal.fire():
            log_command(logger, command, "Received UNHEALTHY command, marked unhealthy", level=logging.WARNING)
        else:
            log_command(logger, command, "Already unhealthy", level=logging.DEBUG)
