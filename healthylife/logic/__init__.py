"""Core business logic layer.

Subpackages:
- coach: provider orchestration, recipe parsing and local fallbacks
- grocery: static grocery plan and cart scoring
- budget: smart calorie budget
- meals: food-photo verdicts for meal logging
"""
__all__ = ["coach", "grocery", "budget", "meals"]
