"""scenes — pygame viewers for the steering simulation."""
