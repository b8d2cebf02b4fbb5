"""Performance System package.

Feature modules (scope, users, inspections, performance, ...) each keep a thin
Flask controller layer on top of service and repository layers.
"""
