"""Portfolio site backend."""
