"""Bookings app package.

This app encapsulates the booking domain: the booking model, the
feasibility and pricing resolver, the cancellation guard and the
periodic sweep that expires unpaid immediate payments. Overlaps on a
berth or a vessel are prevented by row locks taken inside the booking
transaction.
"""
