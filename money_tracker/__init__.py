"""
Money Tracker - Source Package

A personal finance tracker that splits every salary into tithe,
discretionary "wants" and savings, and keeps a running budget of what
has been spent against the wants allocation.

DESIGN PRINCIPLES:
1. Derived numbers are always recomputed from the full entry lists
2. Allocations are fixed at entry time and stored, never recomputed
3. Nothing changes in memory until the store confirms the write
4. Storage and identity providers are swappable
"""

__version__ = "1.0.0"
__author__ = "Money Tracker Team"
