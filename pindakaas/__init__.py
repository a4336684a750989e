"""Variables, CNF formulas with DIMACS I/O, cardinality encoders, linear constraints and integer encodings."""

__version__ = "0.1.0"