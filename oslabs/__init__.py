"""Runnable labs on processes, context switches, races, lock granularity, futexes, signals and file durability."""

__version__ = "0.1.0"