"""Tests for the ``generate-jwt-secret`` command."""

import os

from click.testing import CliRunner

from ..cli import current_secret, generate, write_env_file
from ..keys import load_secret


def test_show():
    """With ``--show``, the secret is printed and no file is written."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(generate, ['--show'])
        assert result.exit_code == 0
        assert 'JWT_SECRET=base64:' in result.output
        assert not os.path.exists('.env')


def test_writes_env_file():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('.env', 'w') as f:
            f.write('FLASK_APP=app.py')
        result = runner.invoke(generate, [])
        assert result.exit_code == 0
        secret = current_secret('.env')
        assert len(load_secret(secret)) == 32
        with open('.env') as f:
            assert f.read() == f'FLASK_APP=app.py\nJWT_SECRET={secret}\n'


def test_existing_secret_declined():
    """An existing secret is only replaced after confirmation."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_env_file('.env', 'base64:old')
        result = runner.invoke(generate, [], input='n\n')
        assert result.exit_code == 1
        assert current_secret('.env') == 'base64:old'


def test_existing_secret_confirmed():
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_env_file('.env', 'base64:old')
        result = runner.invoke(generate, [], input='y\n')
        assert result.exit_code == 0
        assert current_secret('.env') not in ('', 'base64:old')


def test_force():
    """``--force`` replaces the secret in place, keeping other settings."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('.env', 'w') as f:
            f.write('A=1\nJWT_SECRET=base64:old\nB=2\n')
        result = runner.invoke(generate, ['--force', '--env-file', '.env'])
        assert result.exit_code == 0
        secret = current_secret('.env')
        assert secret != 'base64:old'
        with open('.env') as f:
            assert f.read() == f'A=1\nJWT_SECRET={secret}\nB=2\n'
