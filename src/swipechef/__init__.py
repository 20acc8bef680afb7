"""
SwipeChef shopping-list service.

The package exposes the ingredient deck used to triage a shopping list, the meal
suggestion pipeline that turns kept ingredients into recipes, and the HTTP API
wrapping both.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
