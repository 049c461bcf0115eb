"""
Configuration
"""
