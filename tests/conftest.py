"""Test configuration and fixtures for ewallet-ums."""

from tests.fixtures import *  # noqa: F401,F403
