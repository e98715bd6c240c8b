from .client import AfterShipClient

__all__ = ["AfterShipClient"]
