"""
Enrollment Client Services

- config - remote config bootstrap and base URL synchronization
- api - HTTP client and enrollment request functions
"""
