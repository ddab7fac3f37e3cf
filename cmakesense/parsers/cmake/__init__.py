"""CMake language support package.

This package contains the building blocks of the completion engine:
- tokens, scanner: line-oriented tokenizer with cross-line state
- keywords, methods, properties, variables: static command, signature,
  property and variable catalogs
- parsing: context recovery over scanned code
- grammar: tree-sitter-cmake parser for function and macro definitions
"""
