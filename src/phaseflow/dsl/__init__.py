# src/phaseflow/dsl/__init__.py
