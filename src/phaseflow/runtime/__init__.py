# src/phaseflow/runtime/__init__.py
