"""Interfaces of the core.

Contracts (Protocol) implemented by adapters, so services depend on
abstractions and tests can pass plain mocks.
"""
