"""
Periodic persistence and startup recovery of counter state.
"""
