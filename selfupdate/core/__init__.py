"""
Core types: errors, data models, strategy interfaces and the run context.
"""
