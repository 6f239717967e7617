import os
import shlex
import socket

from fabric import Connection, Config
from invoke.exceptions import CommandTimedOut
from logzero import logger
from paramiko import AuthenticationException, SSHException

from chaosaction.channel.base import Channel, ChannelUnavailableError
from chaosaction.common import (Code, Response, return_fail, return_success,
                                DEFAULT_CHAOS_SCRIPT_PATH)
from chaosaction.spec import RunContext


class SSHChannel(Channel):
    """
    Runs helper binaries on a remote host over SSH (Python Fabric).

    The context's deadline is enforced as the remote command timeout.
    Cancellation is checked before the connection is opened; a command that
    is already running remotely runs until it exits or times out.
    """
    config = None

    def __init__(self, host: str, user: str = None, ssh_config_file: str = None,
                 identity_file: str = None, as_sudo: bool = False,
                 script_path: str = DEFAULT_CHAOS_SCRIPT_PATH,
                 connect_timeout: int = 60):
        self.host = host
        self.user = user
        self.as_sudo = as_sudo
        self.connect_timeout = connect_timeout
        self.config = SSHChannel._create_config(ssh_config_file=ssh_config_file)
        self.connect_kwargs = SSHChannel._collect_connect_kwargs(identity_file)
        self._script_path = script_path

    @staticmethod
    def _create_config(ssh_config_file=None):
        if ssh_config_file:
            ssh_config_file = os.path.expanduser(ssh_config_file)
            SSHChannel._is_readable_file(ssh_config_file, 'ssh_config')
        return Config(runtime_ssh_path=ssh_config_file)

    @staticmethod
    def _is_readable_file(path, file_kind):
        if not isinstance(path, str):
            raise ValueError("path to file must be a string")

        if os.access(path, os.R_OK):
            if os.path.isfile(path):
                return
            else:
                raise OSError("Path is not to a file -- '%s'" % str(path))
        else:
            raise OSError("Unable to access the file (not readable) -- %s -- '%s'" % (file_kind, path))

    @staticmethod
    def _collect_connect_kwargs(identity_file):
        connect_kwargs = {}

        if identity_file:
            identity_file = os.path.expanduser(identity_file)
            SSHChannel._is_readable_file(identity_file, 'identity_file')
            connect_kwargs['key_filename'] = identity_file

        if not connect_kwargs:
            connect_kwargs = None

        return connect_kwargs

    def _connection(self) -> Connection:
        return Connection(self.host, config=self.config, user=self.user,
                          connect_timeout=self.connect_timeout,
                          connect_kwargs=self.connect_kwargs)

    def script_path(self) -> str:
        return self._script_path

    def is_command_available(self, command: str) -> bool:
        action = "command -v {}".format(shlex.quote(command))
        try:
            with self._connection() as c:
                rtn = c.run(action, hide=True, warn=True)
        except (AuthenticationException, SSHException, socket.error) as e:
            logger.error("Unable to look up %s on %s", command, self.host)
            raise ChannelUnavailableError(
                "connection to {} failed: {}".format(self.host, e)) from e
        return rtn.ok

    def run(self, ctx: RunContext, script: str, args: str) -> Response:
        response = ctx.done()
        if response is not None:
            return response

        action = "{} {}".format(shlex.quote(script), args).strip()
        logger.debug("Running >%s< on host %s (sudo: %s)", action, self.host,
                     self.as_sudo)
        try:
            with self._connection() as c:
                if self.as_sudo:
                    rtn = c.sudo(action, hide=True, warn=True,
                                 timeout=ctx.remaining())
                else:
                    rtn = c.run(action, hide=True, warn=True,
                                timeout=ctx.remaining())
        except CommandTimedOut:
            logger.error("Running >%s< on host %s timed out", action,
                         self.host)
            return return_fail(Code.Timeout, "{} timed out on {}".format(
                script, self.host))
        except AuthenticationException as e:
            logger.exception(e)
            return return_fail(Code.ChannelError,
                               "authentication to {} failed: {}".format(
                                   self.host, e))
        except (SSHException, socket.error) as e:
            logger.exception(e)
            return return_fail(Code.ChannelError,
                               "connection to {} failed: {}".format(
                                   self.host, e))

        if rtn.return_code == 0:
            return Response.decode(rtn.stdout, return_success(rtn.stdout.strip()))

        message = rtn.stderr.strip() or rtn.stdout.strip() or \
            "{} exited with status {}".format(script, rtn.return_code)
        logger.error("Running >%s< on host %s failed: %s", action, self.host,
                     message)
        return Response.decode(rtn.stdout, return_fail(Code.ExecFailed, message))
