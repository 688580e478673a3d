"""tradelens — Explore insider-trading spreadsheets: extract, search, aggregate."""

from types import MappingProxyType

__version__ = "0.2.0"

HEADER_FIELD_MAP: MappingProxyType[str, str] = MappingProxyType(
    {
        "SYMBOL": "symbol",
        "NAME OF THE ACQUIRER/DISPOSER": "acquirer_disposer",
        "NO. OF SECURITIES (ACQUIRED/DISCLOSED)": "num_securities",
        "VALUE OF SECURITY (ACQUIRED/DISCLOSED)": "value",
        "ACQUISITION/DISPOSAL TRANSACTION TYPE": "transaction_type",
        "DATE OF ALLOTMENT/ACQUISITION FROM": "date",
    }
)

MIN_MATCHED_FIELDS = 3
INFERENCE_SAMPLE_ROWS = 20
PAGE_SIZE = 15
