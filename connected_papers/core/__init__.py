"""Core utilities and shared infrastructure.

- config: Client configuration loading and validation
- constants: Default address, environment names, API paths, poll defaults
- exceptions: Exception taxonomy shared by every layer
"""
