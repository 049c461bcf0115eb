"""
Review orchestration services
"""
