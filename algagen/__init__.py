"""algagen - declarative generator for algebraic structure impls and law tests."""

__version__ = "0.1.0"
