from .ebay import EbayAdapter
from .facebook import FacebookAdapter
from .mercari import MercariAdapter

__all__ = ["EbayAdapter", "FacebookAdapter", "MercariAdapter"]
