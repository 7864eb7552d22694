"""Test suite for objvalid.

This package contains tests for:
- Constraint descriptors and the built-in catalog
- Property path composition
- The validation engine (null vacuity, chaining, nested and per-element descent)
- Message resolution (locale fallback, interpolation, formatting)
- End-to-end scenarios over nested object graphs
"""
