"""Request payload models for the advisor form."""
