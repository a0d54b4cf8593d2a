"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only, explicit rounding),
- easy to audit (explicit intermediate variables),
- small surface-area (pure functions, typed results),
- width-checked (u64 amounts, u128 intermediates).
"""
