"""SIC assembler, token reporting, symbol tables and three-address-code generation."""

__version__ = "0.1.0"