from contextlib import contextmanager

from chaosaction.channel import Channel
from chaosaction.common import return_success


@contextmanager
def patch(owner, attr, value):
    """Monkey patch context manager.

    with patch(os, 'open', myopen):
        ...
    """
    old = getattr(owner, attr)
    setattr(owner, attr, value)
    try:
        yield getattr(owner, attr)
    finally:
        setattr(owner, attr, old)


class RecordingChannel(Channel):
    """Channel that records every run instead of executing anything."""

    def __init__(self, available=('iptables',), response=None,
                 script_path='/opt/chaosblade/bin'):
        self.available = set(available)
        self.response = response or return_success("ok")
        self._script_path = script_path
        self.runs = []
        self.lookups = []

    def script_path(self):
        return self._script_path

    def is_command_available(self, command):
        self.lookups.append(command)
        return command in self.available

    def run(self, ctx, script, args):
        self.runs.append((ctx, script, args))
        return self.response
