"""
Error types for the aggregation engine.

InvalidGeometry is raised by geometry primitives for malformed input and is
handled per item by the aggregators. ConfigurationError is raised at the call
boundary, before any metric is touched.
"""


class InvalidGeometry(ValueError):
    """Raised when a polygon, polyline or coordinate is malformed."""
    pass


class ConfigurationError(ValueError):
    """
    Raised when analysis parameters are invalid.

    Carries an HTTP-style error code so API routes can report it directly.
    """
    def __init__(self, message: str, code: int = 400):
        self.message = message
        self.code = code
        super().__init__(self.message)
