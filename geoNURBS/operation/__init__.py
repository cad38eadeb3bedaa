"""
Operations on curves: arc length analysis and division.
"""
