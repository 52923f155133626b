"""
Infrastructure Layer

Provider SDK adapters behind the ModelClient interface.
"""
