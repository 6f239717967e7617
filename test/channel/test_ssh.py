import tempfile

import pytest
from invoke.exceptions import CommandTimedOut
from paramiko import AuthenticationException

import chaosaction.channel.ssh as ssh
from chaosaction.channel import ChannelUnavailableError, SSHChannel
from chaosaction.common import Code
from chaosaction.executor import HelperExecutor
from chaosaction.spec import ResolvedModel, RunContext
from test import patch


class FakeResult(object):
    def __init__(self, return_code=0, stdout='', stderr=''):
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr

    @property
    def ok(self):
        return self.return_code == 0


class FakeConnection(object):
    calls = []
    result = FakeResult()
    error = None

    def __init__(self, host, config=None, user=None, connect_timeout=None,
                 connect_kwargs=None):
        self.host = host
        self.user = user
        self.connect_kwargs = connect_kwargs

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def _record(self, kind, command, kwargs):
        FakeConnection.calls.append((kind, self.host, self.user, command, kwargs))
        if FakeConnection.error is not None:
            raise FakeConnection.error
        return FakeConnection.result

    def run(self, command, **kwargs):
        return self._record('run', command, kwargs)

    def sudo(self, command, **kwargs):
        return self._record('sudo', command, kwargs)


@pytest.fixture
def connection():
    FakeConnection.calls = []
    FakeConnection.result = FakeResult()
    FakeConnection.error = None
    with patch(ssh, 'Connection', FakeConnection):
        yield FakeConnection


def test_verify_identity_file():
    with pytest.raises(ValueError):
        SSHChannel._is_readable_file(None, "test")

    with pytest.raises(ValueError):
        SSHChannel._is_readable_file(['/tmp/test/'], "test")

    with pytest.raises(OSError):
        SSHChannel._is_readable_file(str(tempfile.gettempdir()), "test")

    with tempfile.NamedTemporaryFile() as f:
        SSHChannel._is_readable_file(f.name, "test")


def test_identity_file_is_passed_to_connection():
    with tempfile.NamedTemporaryFile() as f:
        assert SSHChannel._collect_connect_kwargs(f.name) == {'key_filename': f.name}
    assert SSHChannel._collect_connect_kwargs(None) is None


def test_ssh_config():
    ssh_config = """Host Node1
User ubuntu
IdentityFile /tmp/QA-Pool.pem"""
    with tempfile.NamedTemporaryFile(mode='w') as f:
        f.write(ssh_config)
        f.flush()
        channel = SSHChannel('Node1', ssh_config_file=f.name)
    assert channel.config is not None


def test_run(connection):
    connection.result = FakeResult(0, stdout='done\n')
    channel = SSHChannel('Node1', user='ubuntu', script_path='/opt/chaos/bin')
    rtn = channel.run(RunContext.create(timeout=30), '/opt/chaos/bin/chaos_dropnetwork',
                      '--start --debug=false --local-port 8080')
    assert rtn.success
    assert rtn.result == 'done'
    kind, host, user, command, kwargs = connection.calls[0]
    assert (kind, host, user) == ('run', 'Node1', 'ubuntu')
    assert command == '/opt/chaos/bin/chaos_dropnetwork --start --debug=false --local-port 8080'
    assert kwargs['warn'] is True
    assert 0 < kwargs['timeout'] <= 30


def test_run_as_sudo(connection):
    channel = SSHChannel('Node1', as_sudo=True)
    channel.run(RunContext.destroy('uid1'), '/bin/chaos', '--stop')
    kind, _, _, command, kwargs = connection.calls[0]
    assert kind == 'sudo'
    assert command == '/bin/chaos --stop'
    assert kwargs['timeout'] is None


def test_run_failure(connection):
    connection.result = FakeResult(1, stderr='iptables: Permission denied\n')
    rtn = SSHChannel('Node1').run(RunContext.create(), '/bin/chaos', '--start')
    assert rtn.error_kind is Code.ExecFailed
    assert rtn.err == 'iptables: Permission denied'


def test_run_timeout(connection):
    connection.error = CommandTimedOut.__new__(CommandTimedOut)
    rtn = SSHChannel('Node1').run(RunContext.create(timeout=5), '/bin/chaos', '--start')
    assert rtn.error_kind is Code.Timeout


def test_run_authentication_failure(connection):
    connection.error = AuthenticationException('bad key')
    rtn = SSHChannel('Node1').run(RunContext.create(), '/bin/chaos', '--start')
    assert rtn.error_kind is Code.ChannelError
    assert 'bad key' in rtn.err


def test_cancelled_context_never_connects(connection):
    ctx = RunContext.create()
    ctx.cancel()
    rtn = SSHChannel('Node1').run(ctx, '/bin/chaos', '--start')
    assert rtn.error_kind is Code.Cancelled
    assert connection.calls == []


def test_is_command_available(connection):
    channel = SSHChannel('Node1')
    assert channel.is_command_available('iptables')
    assert connection.calls[0][3] == 'command -v iptables'
    connection.result = FakeResult(1)
    assert not channel.is_command_available('iptables')
    connection.error = AuthenticationException('bad key')
    with pytest.raises(ChannelUnavailableError):
        channel.is_command_available('iptables')


def test_unreachable_host_reports_channel_error(connection):
    connection.error = AuthenticationException('bad key')
    channel = SSHChannel('Node1')
    executor = HelperExecutor("drop", "chaos_dropnetwork",
                              required_commands=["iptables"])
    executor.set_channel(channel)
    rtn = executor.execute("uid1", RunContext.create(),
                           ResolvedModel("drop", {"local-port": "8080"}))
    assert rtn.error_kind is Code.ChannelError
    assert 'bad key' in rtn.err
    assert [call[3] for call in connection.calls] == ['command -v iptables']
