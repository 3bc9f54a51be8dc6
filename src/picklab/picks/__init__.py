"""Pick model, confidence normalization and track-record helpers."""
