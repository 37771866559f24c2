# ==============================================
# NORMALIZATION
# ==============================================
#
# Converts completed HTTP exchanges from `requests` or the Azure SDK
# pipeline into one shape (CompletedExchange).
#
# ==============================================

from .exchange import CompletedExchange, parse_content_length

__all__ = ["CompletedExchange", "parse_content_length"]
