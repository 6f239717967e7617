from logzero import logger

from typing import Iterable

from chaosaction.channel.base import ChannelUnavailableError
from chaosaction.common import Code, Response, return_fail, return_success


def check_commands_available(commands: Iterable[str], channel) -> Response:
    """
    Verify every external tool a fault family depends on is on the target.

    :param commands: The tool names to look up.
    :type commands: Iterable[str]
    :param channel: The channel whose target is checked.
    :type channel: chaosaction.channel.Channel
    :return: Response A CommandNotFound failure naming every missing tool, a
        ChannelError failure if the target could not be reached, or a success.
    """
    missing = []
    for command in commands:
        try:
            available = channel.is_command_available(command)
        except ChannelUnavailableError as e:
            logger.error("Unable to check for %s: %s", command, e)
            return return_fail(Code.ChannelError, str(e))
        if not available:
            missing.append(command)
    if missing:
        logger.error("Missing required commands: %s", missing)
        return return_fail(Code.CommandNotFound,
                           "{} command not found".format(", ".join(missing)))
    return return_success()
