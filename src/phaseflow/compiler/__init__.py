# src/phaseflow/compiler/__init__.py
