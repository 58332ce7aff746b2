#!/usr/bin/env python3
"""
Test suite for the QCS scorer and matcher.

All unit tests run without a database or network:

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

Database access is replaced by an in-memory unit-of-work double
(see tests/conftest.py) and the chat-completions endpoint by a mocked
requests session.
"""
