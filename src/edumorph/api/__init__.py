"""
EduMorph HTTP API
"""
