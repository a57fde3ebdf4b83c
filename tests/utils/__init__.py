"""
Test Utilities
==============

Common fakes and assertion helpers for testing.
"""

from .assertions import *
from .mocks import *
