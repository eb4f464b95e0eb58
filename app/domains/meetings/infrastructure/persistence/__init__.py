"""
Meetings Persistence Layer
"""
