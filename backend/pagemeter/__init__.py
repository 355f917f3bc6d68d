"""PageMeter backend: usage metering and credit charging for PDF processing."""
