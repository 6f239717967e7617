import shlex
import shutil
import subprocess

import psutil
from logzero import logger

from chaosaction.channel.base import Channel
from chaosaction.common import (Code, Response, return_fail, return_success,
                                DEFAULT_CHAOS_SCRIPT_PATH)
from chaosaction.spec import RunContext

# How often a running helper is checked for cancellation, in seconds
POLL_INTERVAL = 0.1


class LocalChannel(Channel):
    """Runs helper binaries as child processes of this process."""

    def __init__(self, script_path: str = DEFAULT_CHAOS_SCRIPT_PATH):
        self._script_path = script_path

    def script_path(self) -> str:
        return self._script_path

    def is_command_available(self, command: str) -> bool:
        return shutil.which(command) is not None

    @staticmethod
    def _kill_process_tree(pid: int):
        try:
            parent = psutil.Process(pid)
            children = parent.children(recursive=True)
        except psutil.NoSuchProcess:
            logger.debug("Process %s already exited", pid)
            return
        for process in children + [parent]:
            try:
                process.kill()
            except psutil.NoSuchProcess:
                logger.debug("Process %s already exited", process.pid)
        psutil.wait_procs(children + [parent], timeout=5)

    def run(self, ctx: RunContext, script: str, args: str) -> Response:
        response = ctx.done()
        if response is not None:
            return response

        command = [script] + shlex.split(args)
        logger.debug("Running %s", command)
        try:
            proc = subprocess.Popen(command, stdout=subprocess.PIPE,
                                    stderr=subprocess.PIPE,
                                    universal_newlines=True)
        except OSError as e:
            logger.error("Unable to run %s", script)
            logger.exception(e)
            return return_fail(Code.ExecFailed, "{}: {}".format(script, e))

        while True:
            try:
                stdout, stderr = proc.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                response = ctx.done()
                if response is not None:
                    logger.error("Killing %s (pid %s): %s", script, proc.pid,
                                 response.err)
                    self._kill_process_tree(proc.pid)
                    proc.communicate()
                    return response

        if proc.returncode == 0:
            return Response.decode(stdout, return_success(stdout.strip()))

        message = stderr.strip() or stdout.strip() or \
            "{} exited with status {}".format(script, proc.returncode)
        logger.error("%s exited with status %s: %s", script, proc.returncode,
                     message)
        return Response.decode(stdout, return_fail(Code.ExecFailed, message))
