"""dexswap: multi-venue DEX swap quoting and execution."""

__version__ = "0.1.0"
