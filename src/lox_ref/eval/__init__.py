"""Operator and truthiness rules used by the evaluator."""
