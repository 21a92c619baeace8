"""Finances app package.

Payments generated from a booking's schedule, club incomes and
expenses, and the analytics that aggregates them. The hourly overdue
task lives in `tasks.py`.
"""
