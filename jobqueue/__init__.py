"""
Bounded Job Queue

An in-process bounded blocking queue connecting producer and consumer threads,
with cooperative shutdown, cancellation, and a harness that measures throughput
and fairness of job distribution across consumers.
"""

__version__ = "1.0.0"
