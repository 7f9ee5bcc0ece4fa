"""Parsing stages: header detection, row parsing, amount/type resolution and document lines."""
