"""Horoscope notification relay service.

Keeping this file makes ``app`` a regular package, so it is never resolved as
a namespace package that could pick up unrelated modules from site-packages.
"""
