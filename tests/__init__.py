"""
Test suite for sparse coding with dictionary learning.

Covers the LARS code step, the Lagrange dual dictionary step, the
alternating minimization loop and the surrounding configuration and CLI.
"""
