"""Terminal display helpers for matrices, merge steps and trees."""
