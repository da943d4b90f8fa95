"""Engine — step runner and pipeline."""
