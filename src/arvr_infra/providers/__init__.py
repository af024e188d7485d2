"""Cloud provider implementations of the Resource Client protocols."""
