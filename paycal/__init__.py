"""
Paycal - Source Package

A payday calendar engine: projected running balances and automatic
deferral of bills the balance cannot cover.

DESIGN PRINCIPLES:
1. The engine is pure: snapshot in, new snapshot out
2. One balance rule, shared by every caller
3. No invented money: an uncoverable bill stays put and is reported
4. Every automatic change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Paycal Team"
