"""
Meetings Application Layer
"""
