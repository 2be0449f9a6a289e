"""
Infrastructure layer - logging, settings, and the exception taxonomy.
"""
