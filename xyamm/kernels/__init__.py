"""
Kernel layer.

`xyamm/kernels/python/` holds the integer-only arithmetic the pool engine is
built on. Kernels know nothing about pools, accounts or custody: they take
reserves and amounts and return typed results (or raise a tagged error).
"""
