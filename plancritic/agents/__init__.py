"""
LLM providers, prompts and response parsing
"""
