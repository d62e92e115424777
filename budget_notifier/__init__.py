"""Budget notifier package initializer.

Smart payment notifications and resilient email delivery for a personal
finance application.
"""
