"""Tariffs app package.

Club tariffs (season lump sum or monthly) bound to berths, and booking
rules that narrow months or add a deposit.
"""
