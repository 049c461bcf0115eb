"""
PlanCritic: LLM review of software implementation plans
"""
