"""
Activity Insights backend: LLM tool orchestration over cached Strava activities.
"""
__version__ = "1.0.0"
