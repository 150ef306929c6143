"""Report writers for graded batches."""
