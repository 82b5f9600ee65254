"""
Helper script for generating a token signing secret.

By default the secret is written to the ``JWT_SECRET`` entry of an env file
(``.env`` in the working directory), replacing any existing value:

.. code-block:: bash

   $ generate-jwt-secret
   JWT_SECRET=base64:kX5Jx1q3...

   $ generate-jwt-secret --show      # Print only; don't touch any files.

Be sure the application is started with the same secret, e.g.
``JWT_SECRET=base64:... FLASK_APP=app.py flask run``. Existing tokens stop
verifying as soon as the secret changes.
"""

import os
import re

import click

from .keys import generate_secret

ENV_KEY = 'JWT_SECRET'
_ENV_LINE = re.compile(rf'^{ENV_KEY}=(.*)$', re.MULTILINE)


def write_env_file(path: str, secret: str) -> None:
    """Set ``JWT_SECRET`` in the env file at ``path``."""
    content = ''
    if os.path.exists(path):
        with open(path, encoding='utf-8') as f:
            content = f.read()
    line = f'{ENV_KEY}={secret}'
    if _ENV_LINE.search(content):
        content = _ENV_LINE.sub(lambda _: line, content, count=1)
    else:
        if content and not content.endswith('\n'):
            content += '\n'
        content += line + '\n'
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)


def current_secret(path: str) -> str:
    """Get the ``JWT_SECRET`` currently set in the env file, if any."""
    if not os.path.exists(path):
        return ''
    with open(path, encoding='utf-8') as f:
        match = _ENV_LINE.search(f.read())
    return match.group(1).strip() if match else ''


@click.command()
@click.option('--show', is_flag=True,
              help='Display the secret instead of modifying files.')
@click.option('--env-file', default='.env', show_default=True,
              help='Env file in which to set JWT_SECRET.')
@click.option('--force', is_flag=True,
              help='Replace an existing secret without asking.')
def generate(show: bool, env_file: str, force: bool) -> None:
    """Generate a secret for signing JWTs."""
    secret = generate_secret()
    if show:
        click.secho('Update your environment with the following secret:',
                    fg='green')
        click.echo(f'{ENV_KEY}={secret}')
        return

    if current_secret(env_file) and not force:
        click.confirm(f'{env_file} already has a {ENV_KEY}; existing tokens'
                      ' will stop working. Replace it?', abort=True)
    write_env_file(env_file, secret)
    click.echo(f'{ENV_KEY}={secret}')


if __name__ == '__main__':
    generate()
