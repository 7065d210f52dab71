from .conv import date_key, parse_trade_date, to_dec_strict

__all__ = ["date_key", "parse_trade_date", "to_dec_strict"]
