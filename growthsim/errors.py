# growthsim/errors.py


class ModelError(ValueError):
    pass


class ConfigurationError(ModelError):
    """Horizon or stage layout cannot be simulated."""


class DomainError(ModelError):
    """A ratio would divide by zero or a negative quantity."""


class RangeError(ModelError):
    """A rate, price or count lies outside its valid range."""
