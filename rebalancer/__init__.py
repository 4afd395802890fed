"""
Cetus CLMM position rebalancer.

Математика тиков, цен и ликвидности, пересчёт диапазона и решение о ребалансе.
"""

__version__ = "0.1.0"
