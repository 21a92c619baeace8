"""Clubs app package.

Yacht clubs (marinas) and their berths. A club defines the navigation
season and the months in which berths can be rented; berths carry the
maximum vessel dimensions they accept.
"""
