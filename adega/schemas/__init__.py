"""
Wire schemas. Python attributes are snake_case, JSON is camelCase,
money is Decimal and serializes as a string.
"""
