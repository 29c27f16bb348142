"""
Market SD - Trading Venue Open/Closed State Evaluator

Determines whether named trading venues are currently open or closed from
compact schedule tokens, using a hysteresis band around session edges to keep
the reported state from flapping near open/close instants.
"""

__version__ = "0.1.0"
__author__ = "Market SD Team"
