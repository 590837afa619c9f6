"""Membership store layer.

This module writes confirmed coupon codes to the remote filter and
exact set, and answers checkout-time membership queries.
"""
