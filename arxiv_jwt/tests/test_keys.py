"""Tests for :mod:`arxiv_jwt.keys`."""

from base64 import b64encode
from unittest import TestCase

from .. import keys
from ..exceptions import ConfigurationError


class TestLoadSecret(TestCase):
    """Tests for :func:`keys.load_secret`."""

    def test_base64_secret(self):
        """A ``base64:`` secret is decoded before use."""
        raw = 'base64:' + b64encode(bytes(32)).decode('ascii')
        self.assertEqual(keys.load_secret(raw), bytes(32))

    def test_raw_secret(self):
        """Any other secret is used as-is."""
        self.assertEqual(keys.load_secret('foosecretfoosecret'),
                         b'foosecretfoosecret')

    def test_bytes_secret(self):
        """Secrets may also be passed as bytes."""
        self.assertEqual(keys.load_secret(b'0123456789abcdef'),
                         b'0123456789abcdef')

    def test_minimum_length(self):
        """Exactly 16 bytes is enough."""
        raw = 'base64:' + b64encode(b'x' * 16).decode('ascii')
        self.assertEqual(len(keys.load_secret(raw)), 16)

    def test_short_secrets(self):
        """Secrets shorter than 16 bytes are rejected."""
        for length in range(1, keys.MIN_SECRET_LENGTH):
            wrapped = 'base64:' + b64encode(b'x' * length).decode('ascii')
            with self.assertRaises(ConfigurationError):
                keys.load_secret(wrapped)
            with self.assertRaises(ConfigurationError):
                keys.load_secret('x' * length)

    def test_empty_base64(self):
        """The prefix alone decodes to nothing."""
        with self.assertRaises(ConfigurationError):
            keys.load_secret('base64:')

    def test_missing_secret(self):
        """A missing secret is a configuration error."""
        with self.assertRaises(ConfigurationError):
            keys.load_secret(None)
        with self.assertRaises(ConfigurationError):
            keys.load_secret('')

    def test_bad_base64(self):
        """The ``base64:`` payload must actually be base64."""
        with self.assertRaises(ConfigurationError):
            keys.load_secret('base64:this is not base64!!')


class TestGenerateSecret(TestCase):
    """Tests for :func:`keys.generate_secret`."""

    def test_generate(self):
        """Generated secrets are wrapped, 32 bytes long, and unique."""
        secret = keys.generate_secret()
        self.assertTrue(secret.startswith('base64:'))
        self.assertEqual(len(keys.load_secret(secret)), 32)
        self.assertNotEqual(secret, keys.generate_secret())
