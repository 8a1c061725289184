"""
scrud-generator: model-driven generation of SCRUD layers.

From declarative model metadata, generates DTOs, mappers, identifier
adapters, repositories, services, controllers and query predicate
factories, never overwriting artifacts that already exist.
"""

__version__ = "0.1.0"
