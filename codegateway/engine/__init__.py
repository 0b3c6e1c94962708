from .analyzer import Analyzer

__all__ = ["Analyzer"]
