"""
Core architecture components for the scheduling backend
"""
