"""
Synthetic data generators: seeded visit simulator and LLM roster generator.
"""
