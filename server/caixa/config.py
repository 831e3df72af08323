import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./caixa.db")

DEFAULT_BASIS = os.getenv("CAIXA_DEFAULT_BASIS", "cash").lower()
DEFAULT_OPEX_BREAKDOWN = os.getenv("CAIXA_DEFAULT_OPEX_BREAKDOWN", "direct").lower()
LOG_LEVEL = os.getenv("CAIXA_LOG_LEVEL", "INFO").upper()

if DEFAULT_BASIS not in {"cash", "accrual"}:
    raise ValueError("CAIXA_DEFAULT_BASIS must be cash or accrual.")
if DEFAULT_OPEX_BREAKDOWN not in {"direct", "fixed_ratio"}:
    raise ValueError("CAIXA_DEFAULT_OPEX_BREAKDOWN must be direct or fixed_ratio.")
