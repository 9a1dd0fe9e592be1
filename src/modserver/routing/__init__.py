"""Routing — per-module route tables and the live mount table.

A ``Router`` is compiled once per module and never changes afterwards.
The ``MountTable`` is the only routing structure mutated at runtime.
"""
