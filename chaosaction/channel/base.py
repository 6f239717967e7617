import abc

from chaosaction.common import Response
from chaosaction.spec import RunContext


class ChannelUnavailableError(Exception):
    """The channel could not reach its target."""


class Channel(abc.ABC):
    """Capability to run a helper binary on some target."""

    @abc.abstractmethod
    def run(self, ctx: RunContext, script: str, args: str) -> Response:
        raise NotImplementedError('users must define run to use this base class')

    @abc.abstractmethod
    def is_command_available(self, command: str) -> bool:
        """
        Is command installed on the target?

        :raises ChannelUnavailableError: The target could not be reached.
        """
        raise NotImplementedError(
            'users must define is_command_available to use this base class')

    @abc.abstractmethod
    def script_path(self) -> str:
        raise NotImplementedError(
            'users must define script_path to use this base class')
