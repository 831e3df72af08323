from .money import quantize_money, quantize_percent, to_decimal

__all__ = ["quantize_money", "quantize_percent", "to_decimal"]
