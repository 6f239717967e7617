import posixpath
import shlex

from logzero import logger
from typing import Iterable, List

from chaosaction.common import (Code, Response, return_fail,
                                DEFAULT_CHAOS_DEBUG)
from chaosaction.preconditions import check_commands_available
from chaosaction.spec import Executor, ResolvedModel, RunContext


class HelperExecutor(Executor):
    """
    Executor for fault families implemented by an external helper binary.

    The helper is invoked as

        <script path>/<bin name> --start|--stop --debug=<bool> [--<flag> <value>]*

    where the flags are the action's declared matchers and flags, in declared
    order, skipping the ones the user left empty. Revert passes the same flag
    values as apply so it affects exactly the scope that was applied.
    """

    def __init__(self, name: str, bin_name: str,
                 required_commands: Iterable[str] = (),
                 arg_names: Iterable[str] = (),
                 debug: bool = DEFAULT_CHAOS_DEBUG):
        if not bin_name:
            raise ValueError("Executor {} needs a helper bin name".format(name))
        self._name = name
        self._bin_name = bin_name
        self._required_commands = tuple(required_commands)
        self._arg_names = tuple(arg_names)
        self._debug = debug
        self._channel = None

    def name(self) -> str:
        return self._name

    @property
    def bin_name(self) -> str:
        return self._bin_name

    @property
    def required_commands(self):
        return self._required_commands

    @property
    def channel(self):
        return self._channel

    def set_channel(self, channel):
        self._channel = channel

    def build_args(self, model: ResolvedModel, destroy: bool) -> str:
        """
        Render the helper's argument string.

        The result only depends on the mode and the flag values, never on the
        order the values were inserted into the model.
        """
        args: List[str] = [
            "--stop" if destroy else "--start",
            "--debug={}".format("true" if self._debug else "false")
        ]
        for arg_name in self._arg_names:
            value = model.get(arg_name)
            if value:
                args.append("--{} {}".format(arg_name, shlex.quote(value)))
        return " ".join(args)

    def execute(self, uid: str, ctx: RunContext,
                model: ResolvedModel) -> Response:
        if self._channel is None:
            logger.error("Executor %s has no channel bound", self._name)
            return return_fail(Code.ServerError, "channel is nil")

        response = check_commands_available(self._required_commands,
                                            self._channel)
        if not response.success:
            return response

        response = ctx.done()
        if response is not None:
            logger.error("Not running %s for %s: %s", self._name, uid,
                         response.err)
            return response

        destroy = ctx.is_destroy()
        args = self.build_args(model, destroy)
        script = posixpath.join(self._channel.script_path(), self._bin_name)
        logger.debug("%s experiment %s: %s %s",
                     "Destroying" if destroy else "Creating", uid, script, args)
        return self._channel.run(ctx, script, args)
