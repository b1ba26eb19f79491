"""Application layer: admission control, reply dispatch and wiring."""
