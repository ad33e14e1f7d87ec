"""Core components for the pyarraycmp library.

This package contains the comparison engine, the configuration manager that
feeds it, and the exceptions both of them raise.
"""
