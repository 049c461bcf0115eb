"""
Review data models
"""
