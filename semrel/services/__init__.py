"""Application services.

Services implement release behaviour on top of the core types and the
platform/git adapters.
"""
