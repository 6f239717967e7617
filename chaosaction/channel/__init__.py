"""
Channels run helper binaries somewhere: on the local host (LocalChannel) or on
a remote host over SSH (SSHChannel).

Every channel turns the outcome of a run (exit status, timeout, cancellation,
connection failure) into a Response. Executors pass that Response through
unchanged.
"""
from chaosaction.channel.base import Channel, ChannelUnavailableError
from chaosaction.channel.local import LocalChannel
from chaosaction.channel.ssh import SSHChannel

__all__ = ['Channel', 'ChannelUnavailableError', 'LocalChannel', 'SSHChannel']
